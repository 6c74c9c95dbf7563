"""Runtime helpers: an in-memory host and the command line."""
from __future__ import annotations

from .simulated_host import SimulatedHost

__all__ = ["SimulatedHost"]
