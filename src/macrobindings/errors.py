"""Exception types raised by the macro binding engine."""
from __future__ import annotations


class MacroBindingsError(Exception):
    """Base class for engine errors."""


class LockedMutationError(MacroBindingsError, RuntimeError):
    """Raised when a binding mutation is attempted during host lockdown."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"cannot {operation} while bindings are locked")
        self.operation = operation


__all__ = ["LockedMutationError", "MacroBindingsError"]
