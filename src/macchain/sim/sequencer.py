"""
Behavioral model of the sequencer.

controls() is the combinational half (outputs from the current state) and
advance() is the clock edge. Mirrors macchain.controller.sequencer.Sequencer.
"""

from dataclasses import dataclass

from ..config import DrainMode, MacChainConfig, Phase


@dataclass
class Controls:
    """Per-cycle sequencer outputs."""

    weight_load: list[bool]
    bias_load: list[bool]
    accumulate: list[bool]
    read_index: int = 0
    valid: bool = False

    @staticmethod
    def _mask(bits: list[bool]) -> int:
        return sum(1 << i for i, bit in enumerate(bits) if bit)

    @property
    def weight_load_mask(self) -> int:
        """weight_load as the integer an N-bit enable bus would carry."""
        return self._mask(self.weight_load)

    @property
    def bias_load_mask(self) -> int:
        return self._mask(self.bias_load)

    @property
    def accumulate_mask(self) -> int:
        return self._mask(self.accumulate)


@dataclass
class SequencerModel:
    """
    Cycle-accurate five-phase sequencer.

    Attributes:
        config: Hardware configuration
        phase: Current phase
        cycle: Cycles already spent in the current phase (cycle_in_phase)
    """

    config: MacChainConfig
    phase: Phase = Phase.IDLE
    cycle: int = 0

    def reset(self) -> None:
        self.phase = Phase.IDLE
        self.cycle = 0

    def controls(self) -> Controls:
        """Enables and read-out selection for the current cycle."""
        n = self.config.num_lanes
        idle = [False] * n
        ctrl = Controls(weight_load=list(idle), bias_load=list(idle), accumulate=list(idle))

        if self.phase is Phase.LOAD_WEIGHTS:
            ctrl.weight_load = [i == self.cycle for i in range(n)]
        elif self.phase is Phase.LOAD_BIASES:
            ctrl.bias_load = [i == self.cycle for i in range(n)]
        elif self.phase is Phase.COMPUTE:
            ctrl.accumulate = [i <= self.cycle < i + n for i in range(n)]
        elif self.phase is Phase.DRAIN:
            ctrl.read_index = self.cycle % n
            ctrl.valid = True

        return ctrl

    def advance(self, reset: bool = False) -> None:
        """Clock edge: move to the next (phase, cycle)."""
        if reset:
            self.reset()
            return

        n = self.config.num_lanes
        phase, cycle = self.phase, self.cycle

        if phase is Phase.IDLE:
            self._enter(Phase.LOAD_WEIGHTS)
        elif phase is Phase.LOAD_WEIGHTS:
            self._count_or_enter(cycle == n - 1, Phase.LOAD_BIASES)
        elif phase is Phase.LOAD_BIASES:
            self._count_or_enter(cycle == n - 1, Phase.COMPUTE)
        elif phase is Phase.COMPUTE:
            self._count_or_enter(cycle == 2 * n - 2, Phase.DRAIN)
        elif phase is Phase.DRAIN:
            if self.config.drain_mode is DrainMode.FULL:
                self._count_or_enter(cycle == n - 1, Phase.IDLE)
            else:
                # Counter held; one DRAIN cycle per run
                self.phase = Phase.IDLE

    def _enter(self, phase: Phase) -> None:
        self.phase = phase
        self.cycle = 0

    def _count_or_enter(self, done: bool, next_phase: Phase) -> None:
        if done:
            self._enter(next_phase)
        else:
            self.cycle += 1
