"""
Sequencer - Fixed-schedule controller for the MAC chain.

The sequencer has no handshaking: every decision is a function of the current
phase and of cycle_in_phase, the number of cycles already spent in it.

State Machine:
    IDLE -> LOAD_WEIGHTS -> LOAD_BIASES -> COMPUTE -> DRAIN -> IDLE

Schedule for N lanes:
    IDLE          1 cycle     nothing enabled
    LOAD_WEIGHTS  N cycles    weight_load[cycle] = 1
    LOAD_BIASES   N cycles    bias_load[cycle] = 1
    COMPUTE       2N-1 cycles accumulate[i] = 1 for i <= cycle < i+N
    DRAIN         1 or N      read_index = cycle mod N, valid = 1

In COMPUTE, lane i's window opens one cycle after lane i-1's, matching the
one-cycle relay delay between lanes. With DrainMode.SINGLE the machine leaves
DRAIN after one cycle and only lane 0 is ever read out; DrainMode.FULL holds
DRAIN for N cycles so every lane is exposed.
"""

from amaranth import Module, Signal
from amaranth.lib.wiring import Component, In, Out

from ..config import DrainMode, MacChainConfig, Phase


class Sequencer(Component):
    """
    Sequencer for the weight-stationary MAC chain.

    Ports:
        in_clear: Synchronous clear, forces IDLE and cycle 0

        out_weight_load: Per-lane weight load enables
        out_bias_load: Per-lane bias load enables
        out_accumulate: Per-lane accumulate enables
        out_read_index: Lane selected for read-out (0 outside DRAIN)
        out_valid: Read-out value is a result (DRAIN)
        out_phase: Current phase (Phase encoding)
        out_cycle: Current cycle_in_phase

    Parameters:
        config: MacChainConfig with lane count and drain mode
    """

    def __init__(self, config: MacChainConfig):
        self.config = config
        lanes = config.num_lanes

        super().__init__(
            {
                "in_clear": In(1),
                "out_weight_load": Out(lanes),
                "out_bias_load": Out(lanes),
                "out_accumulate": Out(lanes),
                "out_read_index": Out(config.index_bits),
                "out_valid": Out(1),
                "out_phase": Out(3),
                "out_cycle": Out(config.counter_bits),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config
        n = cfg.num_lanes

        phase = Signal(3, init=Phase.IDLE.value)
        cycle = Signal(cfg.counter_bits)

        # Default outputs
        m.d.comb += [
            self.out_weight_load.eq(0),
            self.out_bias_load.eq(0),
            self.out_accumulate.eq(0),
            self.out_read_index.eq(0),
            self.out_valid.eq(0),
            self.out_phase.eq(phase),
            self.out_cycle.eq(cycle),
        ]

        with m.Switch(phase):
            with m.Case(Phase.IDLE):
                m.d.sync += [
                    phase.eq(Phase.LOAD_WEIGHTS),
                    cycle.eq(0),
                ]

            with m.Case(Phase.LOAD_WEIGHTS):
                for i in range(n):
                    m.d.comb += self.out_weight_load[i].eq(cycle == i)

                with m.If(cycle == n - 1):
                    m.d.sync += [
                        phase.eq(Phase.LOAD_BIASES),
                        cycle.eq(0),
                    ]
                with m.Else():
                    m.d.sync += cycle.eq(cycle + 1)

            with m.Case(Phase.LOAD_BIASES):
                for i in range(n):
                    m.d.comb += self.out_bias_load[i].eq(cycle == i)

                with m.If(cycle == n - 1):
                    m.d.sync += [
                        phase.eq(Phase.COMPUTE),
                        cycle.eq(0),
                    ]
                with m.Else():
                    m.d.sync += cycle.eq(cycle + 1)

            with m.Case(Phase.COMPUTE):
                # Sliding window: lane i active for cycles i .. i+N-1
                for i in range(n):
                    m.d.comb += self.out_accumulate[i].eq((cycle >= i) & (cycle < i + n))

                with m.If(cycle == 2 * n - 2):
                    m.d.sync += [
                        phase.eq(Phase.DRAIN),
                        cycle.eq(0),
                    ]
                with m.Else():
                    m.d.sync += cycle.eq(cycle + 1)

            with m.Case(Phase.DRAIN):
                m.d.comb += [
                    self.out_read_index.eq(cycle % n),
                    self.out_valid.eq(1),
                ]

                if cfg.drain_mode is DrainMode.FULL:
                    with m.If(cycle == n - 1):
                        m.d.sync += [
                            phase.eq(Phase.IDLE),
                            cycle.eq(0),
                        ]
                    with m.Else():
                        m.d.sync += cycle.eq(cycle + 1)
                else:
                    # Counter is held; DRAIN lasts exactly one cycle
                    m.d.sync += phase.eq(Phase.IDLE)

            with m.Default():
                m.d.sync += [
                    phase.eq(Phase.IDLE),
                    cycle.eq(0),
                ]

        # Clear overrides every transition above
        with m.If(self.in_clear):
            m.d.sync += [
                phase.eq(Phase.IDLE),
                cycle.eq(0),
            ]

        return m
