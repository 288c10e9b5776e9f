"""
Macchain Configuration Module

This module defines the configuration dataclass for the MAC chain generator.
All hardware parameters are specified here and propagate through both the
Amaranth RTL and the cycle-accurate behavioral model.

The chain computes, for every lane i:

    acc[i] = bias[i] + sum_k(activation[k] * weight[i])

with the accumulator either wrapping (two's complement) or saturating at the
configured accumulator width.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class Phase(IntEnum):
    """
    Sequencer states, in the order a run visits them.

    The values are the encoding of the RTL phase register.
    """

    IDLE = 0
    LOAD_WEIGHTS = 1
    LOAD_BIASES = 2
    COMPUTE = 3
    DRAIN = 4


class DrainMode(Enum):
    """
    How long the sequencer stays in DRAIN before returning to IDLE.

    - SINGLE: one DRAIN tick per run; only lane 0's accumulator is exposed.
      This is the transition table as literally specified.
    - FULL: N DRAIN ticks; read_index cycles 0..N-1 so every lane is exposed.
    """

    SINGLE = 0
    FULL = 1


@dataclass
class MacChainConfig:
    """
    Configuration for the weight-stationary MAC chain.

    Example:
        >>> config = MacChainConfig(num_lanes=4, data_bits=8, acc_bits=16)
        >>> print(config.compute_cycles)  # 7
        >>> print(config.acc_max)  # 32767
    """

    # =========================================================================
    # Chain Dimensions
    # =========================================================================
    num_lanes: int = 4
    """Number of lanes (processing elements) in the chain."""

    # =========================================================================
    # Data Types (bit widths)
    # =========================================================================
    data_bits: int = 8
    """Bit width of weights, biases and activations (signed)."""

    acc_bits: int = 16
    """Bit width of each lane accumulator (signed)."""

    # =========================================================================
    # Arithmetic and Sequencing
    # =========================================================================
    saturating: bool = False
    """If True, accumulator sums clamp to the signed range instead of wrapping."""

    drain_mode: DrainMode = DrainMode.SINGLE
    """Number of DRAIN ticks per run (see DrainMode)."""

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def data_max(self) -> int:
        """Largest signed operand value."""
        return (1 << (self.data_bits - 1)) - 1

    @property
    def data_min(self) -> int:
        """Smallest signed operand value."""
        return -(1 << (self.data_bits - 1))

    @property
    def acc_max(self) -> int:
        """Largest signed accumulator value (saturation ceiling)."""
        return (1 << (self.acc_bits - 1)) - 1

    @property
    def acc_min(self) -> int:
        """Smallest signed accumulator value (saturation floor)."""
        return -(1 << (self.acc_bits - 1))

    @property
    def product_bits(self) -> int:
        """Width of a full signed operand product."""
        return 2 * self.data_bits

    @property
    def sum_bits(self) -> int:
        """Width of the accumulate adder, wide enough to detect overflow."""
        return max(self.acc_bits, self.product_bits) + 1

    @property
    def load_cycles(self) -> int:
        """Ticks spent in LOAD_WEIGHTS (and again in LOAD_BIASES)."""
        return self.num_lanes

    @property
    def compute_cycles(self) -> int:
        """Ticks spent in COMPUTE: lane N-1's window closes at 2N-2."""
        return 2 * self.num_lanes - 1

    @property
    def drain_cycles(self) -> int:
        """Ticks spent in DRAIN."""
        return self.num_lanes if self.drain_mode is DrainMode.FULL else 1

    @property
    def run_cycles(self) -> int:
        """Ticks in one full IDLE -> ... -> DRAIN traversal."""
        return 1 + 2 * self.load_cycles + self.compute_cycles + self.drain_cycles

    @property
    def counter_max(self) -> int:
        """Largest value cycle_in_phase ever holds."""
        return self.compute_cycles - 1

    @property
    def counter_bits(self) -> int:
        """Bits needed for the cycle_in_phase counter."""
        return max(1, self.counter_max.bit_length())

    @property
    def index_bits(self) -> int:
        """Bits needed to select one lane."""
        return max(1, (self.num_lanes - 1).bit_length())

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.num_lanes > 0, "num_lanes must be positive"
        assert self.data_bits >= 2, "data_bits must be at least 2"
        assert self.acc_bits >= self.data_bits + 1, (
            "acc_bits must be >= data_bits + 1 to hold a sign-extended bias"
        )
        assert isinstance(self.drain_mode, DrainMode), "drain_mode must be a DrainMode"


# Pre-defined configurations
DEFAULT_CONFIG = MacChainConfig()
"""4 lanes, 8-bit operands, 16-bit wrapping accumulators."""

SMALL_SAT_CONFIG = MacChainConfig(
    num_lanes=4,
    data_bits=4,
    acc_bits=8,
    saturating=True,
)
"""4 lanes, 4-bit operands, 8-bit saturating accumulators."""

WIDE_CONFIG = MacChainConfig(
    num_lanes=8,
    data_bits=8,
    acc_bits=16,
)
"""8 lanes, 8-bit operands, 16-bit wrapping accumulators."""
