"""Controller modules for the MAC chain."""

from .sequencer import Sequencer

__all__ = ["Sequencer"]
