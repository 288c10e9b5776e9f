"""
Cycle-accurate behavioral model of the MAC chain.

The model evaluates the same register-transfer contract as the RTL in plain
Python and serves as the golden reference for RTL and cocotb tests.
"""

from .engine import LaneChainModel, MacChainModel, TickRecord
from .lane import LaneModel
from .sequencer import Controls, SequencerModel

__all__ = [
    "Controls",
    "LaneChainModel",
    "LaneModel",
    "MacChainModel",
    "SequencerModel",
    "TickRecord",
]
