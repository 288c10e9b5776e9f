"""
Macchain - A weight-stationary multiply-accumulate chain.

This package provides a configurable MAC chain as Amaranth HDL (for
simulation and Verilog generation) together with a cycle-accurate Python
model of the same design.
"""

from .config import DrainMode, MacChainConfig, Phase

__version__ = "0.1.0"
__all__ = ["MacChainConfig", "DrainMode", "Phase", "__version__"]
