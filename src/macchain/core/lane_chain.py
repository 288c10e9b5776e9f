"""
LaneChain - A 1-D systolic chain of Lanes.

Activations enter lane 0 and move one lane per cycle through each lane's
relay register. Weights and biases are taken straight from the external
input, so the lane selected by the sequencer latches the value presented in
that cycle.

Example 4-lane chain:

                 in_data
                    |
        +-----------+-----------+-----------+  (in_load, broadcast)
        |           |           |           |
    [Lane 0] --> [Lane 1] --> [Lane 2] --> [Lane 3]
        |           |           |           |
      acc_0       acc_1       acc_2       acc_3
        |           |           |           |
        +-----------+-----+-----+-----------+
                          |
                  read_index mux --> out_data

An activation applied at cycle t reaches lane i's multiplier at cycle t+i.
"""

from amaranth import Module, signed
from amaranth.lib.wiring import Component, In, Out

from ..config import MacChainConfig
from .lane import Lane


class LaneChain(Component):
    """
    LaneChain - N lanes wired in a systolic chain with a read-out mux.

    Ports:
        in_data: External data for this cycle
        in_weight_load: Per-lane weight load enables (bit i -> lane i)
        in_bias_load: Per-lane bias load enables
        in_accumulate: Per-lane accumulate enables
        in_read_index: Lane whose accumulator drives out_data
        in_clear: Synchronous clear (broadcast to all lanes)

        out_data: Accumulator of the selected lane (0 if index out of range)
        out_acc_0..N: Per-lane accumulators
        out_relay_0..N: Per-lane relay registers
        out_weight_0..N: Per-lane weights

    Parameters:
        config: MacChainConfig with lane count and data widths
    """

    def __init__(self, config: MacChainConfig):
        self.config = config
        lanes = config.num_lanes

        ports = {
            "in_data": In(signed(config.data_bits)),
            "in_weight_load": In(lanes),
            "in_bias_load": In(lanes),
            "in_accumulate": In(lanes),
            "in_read_index": In(config.index_bits),
            "in_clear": In(1),
            "out_data": Out(signed(config.acc_bits)),
        }

        # Per-lane observation ports
        for i in range(lanes):
            ports[f"out_acc_{i}"] = Out(signed(config.acc_bits))
            ports[f"out_relay_{i}"] = Out(signed(config.data_bits))
            ports[f"out_weight_{i}"] = Out(signed(config.data_bits))

        super().__init__(ports)

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config
        n = cfg.num_lanes

        lanes = [Lane(cfg) for _ in range(n)]
        for i, lane in enumerate(lanes):
            m.submodules[f"lane_{i}"] = lane

        # =================================================================
        # Activation Wiring - lane i reads lane i-1's relay
        # =================================================================
        m.d.comb += lanes[0].in_data.eq(self.in_data)
        for i in range(1, n):
            m.d.comb += lanes[i].in_data.eq(lanes[i - 1].out_data)

        # =================================================================
        # Load Value and Control Broadcast
        # =================================================================
        for i, lane in enumerate(lanes):
            m.d.comb += [
                lane.in_load.eq(self.in_data),
                lane.in_weight_load.eq(self.in_weight_load[i]),
                lane.in_bias_load.eq(self.in_bias_load[i]),
                lane.in_accumulate.eq(self.in_accumulate[i]),
                lane.in_clear.eq(self.in_clear),
            ]

        # =================================================================
        # Observation Ports
        # =================================================================
        for i, lane in enumerate(lanes):
            m.d.comb += [
                getattr(self, f"out_acc_{i}").eq(lane.out_acc),
                getattr(self, f"out_relay_{i}").eq(lane.out_data),
                getattr(self, f"out_weight_{i}").eq(lane.out_weight),
            ]

        # =================================================================
        # Read-out Mux
        # =================================================================
        with m.Switch(self.in_read_index):
            for i, lane in enumerate(lanes):
                with m.Case(i):
                    m.d.comb += self.out_data.eq(lane.out_acc)
            with m.Default():
                m.d.comb += self.out_data.eq(0)

        return m
