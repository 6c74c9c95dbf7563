"""Interfaces the engine requires from the host game client."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Protocol, Sequence


MACRO_ACTION_KIND = "macro"
NO_BINDING = "nil"

DriverCallback = Callable[[Optional[str]], None]
IdleCallback = Callable[[], None]


class EventKind(Enum):
    """Notifications the host delivers to the engine."""

    MACROS_CHANGED = auto()
    BINDINGS_CHANGED = auto()
    SLOT_CHANGED = auto()
    LOCK_LIFTED = auto()
    LOGIN = auto()


EventListener = Callable[..., object]


@dataclass(frozen=True)
class ActionInfo:
    """Occupant of an action-bar slot as reported by the host."""

    kind: str
    identifier: int | str

    @property
    def is_macro(self) -> bool:
        return self.kind == MACRO_ACTION_KIND


@dataclass(frozen=True)
class BarState:
    """Transient bar modes consulted by the native page response."""

    action_bar_page: int = 1
    vehicle_bar_index: int | None = None
    override_bar_index: int | None = None
    temp_shapeshift_bar_index: int | None = None
    bonus_bar_offset: int = 0
    num_action_bar_pages: int = 6


class HostEnvironment(Protocol):
    """Protocol implemented by the host runtime the engine is loaded into."""

    def get_macro_body(self, macro_id: int) -> str | None:
        """Return the body text of ``macro_id`` or ``None`` when empty."""

    def get_num_bindings(self) -> int:
        """Return the number of commands in the binding registry."""

    def get_binding(self, index: int) -> str:
        """Return the command stored at registry ``index`` (1-based)."""

    def get_binding_name(self, command: str) -> str:
        """Return the display name for ``command``."""

    def get_binding_keys(self, command: str) -> Sequence[str]:
        """Return the physical keys currently bound to ``command``."""

    def get_action_info(self, slot: int) -> ActionInfo | None:
        """Return what occupies action-bar ``slot``."""

    def is_locked(self) -> bool:
        """Whether binding mutations are currently vetoed."""

    def apply_binding(self, key: str, action: str | None) -> None:
        """Install ``action`` on ``key`` or clear the override when ``None``."""

    def register_condition_driver(
        self, owner: str, expression: str, callback: DriverCallback
    ) -> None:
        """Evaluate ``expression`` now and whenever its inputs change."""

    def unregister_condition_driver(self, owner: str) -> None:
        """Stop evaluating the driver registered for ``owner``."""

    def evaluate_options(self, expression: str) -> str | None:
        """Evaluate ``expression`` once and return the selected value."""

    def get_bar_state(self) -> BarState:
        """Return the transient bar modes used for native paging."""

    def schedule_idle(self, callback: IdleCallback) -> None:
        """Run ``callback`` at the next idle moment."""

    def print_message(self, text: str) -> None:
        """Show ``text`` to the player."""

    def subscribe(self, listener: EventListener) -> None:
        """Deliver every notification to ``listener(kind, *args)``."""


def normalise_state(value: str | None) -> str | None:
    """Map the ``"nil"`` sentinel and blank results to ``None``."""

    if value is None:
        return None
    text = value.strip()
    if not text or text == NO_BINDING:
        return None
    return text


def macro_driver_owner(macro_id: int) -> str:
    return f"macro-{macro_id}"


def page_driver_owner(bar_id: int) -> str:
    return f"page-{bar_id}"


__all__ = [
    "ActionInfo",
    "BarState",
    "DriverCallback",
    "EventKind",
    "EventListener",
    "HostEnvironment",
    "IdleCallback",
    "MACRO_ACTION_KIND",
    "NO_BINDING",
    "macro_driver_owner",
    "normalise_state",
    "page_driver_owner",
]
