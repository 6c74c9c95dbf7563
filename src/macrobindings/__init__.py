"""Conditional key bindings driven by macro text and action-bar placement."""
from __future__ import annotations

from .api import MacroBindings
from .bar_config import BarConfigError, load_bar_config
from .bar_defaults import BarDefaults, PageDriverConfig
from .engine import MacroBindingsEngine
from .errors import LockedMutationError, MacroBindingsError
from .host import ActionInfo, BarState, EventKind, HostEnvironment
from .parser import BindingNameIndex, Condition, ParsedMacro, parse_body


__all__ = [
    "ActionInfo",
    "BarConfigError",
    "BarDefaults",
    "BarState",
    "BindingNameIndex",
    "Condition",
    "EventKind",
    "HostEnvironment",
    "LockedMutationError",
    "MacroBindings",
    "MacroBindingsEngine",
    "MacroBindingsError",
    "PageDriverConfig",
    "ParsedMacro",
    "load_bar_config",
    "parse_body",
]
