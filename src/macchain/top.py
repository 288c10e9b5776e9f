"""
MacChainTop - Top-level integration of the MAC chain.

This module wires together the two subsystems:
- Sequencer: Fixed schedule of load/compute/drain enables
- LaneChain: Weight-stationary systolic lanes with read-out mux

External Interface:
- One signed data_bits value in per cycle (weight, bias or activation
  depending on the current phase)
- One signed acc_bits value out per cycle (a result only while valid is high)

Run timing for N lanes (cycle offsets from the IDLE cycle):
    0                  IDLE
    1 .. N             LOAD_WEIGHTS  (data_in = weight[0..N-1])
    N+1 .. 2N          LOAD_BIASES   (data_in = bias[0..N-1])
    2N+1 .. 4N-1       COMPUTE       (data_in = activations, zero padded)
    4N ..              DRAIN         (data_out = acc[read_index], valid = 1)

The caller must drive data_in on the matching cycles; there is no handshake.
"""

from amaranth import Module, signed
from amaranth.lib.wiring import Component, In, Out

from .config import MacChainConfig
from .controller.sequencer import Sequencer
from .core.lane_chain import LaneChain


class MacChainTop(Component):
    """
    Top-level weight-stationary MAC chain.

    Ports:
        clear: Synchronous clear (lanes and sequencer)
        data_in: External data for this cycle
        data_out: Accumulator of the selected lane
        valid: data_out holds a result (DRAIN phase)
        phase: Current sequencer phase
        read_index: Lane currently selected for read-out

    Parameters:
        config: MacChainConfig
    """

    def __init__(self, config: MacChainConfig):
        self.config = config

        super().__init__(
            {
                "clear": In(1),
                "data_in": In(signed(config.data_bits)),
                "data_out": Out(signed(config.acc_bits)),
                "valid": Out(1),
                "phase": Out(3),
                "read_index": Out(config.index_bits),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        m.submodules.sequencer = sequencer = Sequencer(cfg)
        m.submodules.chain = chain = LaneChain(cfg)

        m.d.comb += [
            sequencer.in_clear.eq(self.clear),
            chain.in_clear.eq(self.clear),
            chain.in_data.eq(self.data_in),
            chain.in_weight_load.eq(sequencer.out_weight_load),
            chain.in_bias_load.eq(sequencer.out_bias_load),
            chain.in_accumulate.eq(sequencer.out_accumulate),
            chain.in_read_index.eq(sequencer.out_read_index),
        ]

        m.d.comb += [
            self.data_out.eq(chain.out_data),
            self.valid.eq(sequencer.out_valid),
            self.phase.eq(sequencer.out_phase),
            self.read_index.eq(sequencer.out_read_index),
        ]

        return m
