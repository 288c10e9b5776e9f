"""
Core MAC chain components.

This module contains the datapath building blocks:
- Lane: Processing element (weight-stationary MAC unit)
- LaneChain: Systolic chain of Lanes with a read-out mux
"""

from .lane import Lane
from .lane_chain import LaneChain

__all__ = ["Lane", "LaneChain"]
