"""
Behavioral model of one lane.

Mirrors macchain.core.lane.Lane register for register. All values are plain
Python ints kept inside their signed widths by the helpers in macchain.arith.
"""

from dataclasses import dataclass

from ..arith import accumulate, sign_extend
from ..config import MacChainConfig


@dataclass
class LaneModel:
    """
    Cycle-accurate lane.

    Attributes:
        config: Hardware configuration
        weight: Stationary weight (data_bits, signed)
        accumulator: Running sum (acc_bits, signed)
        relay: Input of the previous cycle, seen by the next lane
    """

    config: MacChainConfig
    weight: int = 0
    accumulator: int = 0
    relay: int = 0

    def clear(self) -> None:
        """Synchronous clear: zero weight and accumulator, hold relay."""
        self.weight = 0
        self.accumulator = 0

    def step(
        self,
        input_value: int,
        load_value: int,
        weight_load: bool = False,
        bias_load: bool = False,
        accumulate_en: bool = False,
    ) -> None:
        """
        Advance one clock edge.

        The guards are independent. When bias_load and accumulate_en are both
        set, the accumulate result is the one that lands.
        """
        cfg = self.config
        input_value = sign_extend(input_value, cfg.data_bits)
        load_value = sign_extend(load_value, cfg.data_bits)

        # Reads use the pre-edge weight and accumulator
        weight = self.weight
        acc = self.accumulator

        self.relay = input_value

        if weight_load:
            self.weight = load_value

        if bias_load:
            self.accumulator = sign_extend(load_value, cfg.acc_bits)

        if accumulate_en:
            self.accumulator = accumulate(acc, input_value * weight, cfg.acc_bits, cfg.saturating)
