"""Binding synchronisation engine exposed via the macrobindings package."""
from __future__ import annotations

from .context import BarPage, BindingClaim, EngineContext, PageHandler
from .dispatcher import EventDispatcher, EventKind, IdleDebouncer, PendingEvent
from .drivers import DriverTable
from .kernel import MacroBindingsEngine
from .pages import PageDriver, native_page_response
from .slots import SlotIndex
from .synchronizer import BindingSynchronizer


__all__ = [
    "BarPage",
    "BindingClaim",
    "BindingSynchronizer",
    "DriverTable",
    "EngineContext",
    "EventDispatcher",
    "EventKind",
    "IdleDebouncer",
    "MacroBindingsEngine",
    "PageDriver",
    "PageHandler",
    "PendingEvent",
    "SlotIndex",
    "native_page_response",
]
