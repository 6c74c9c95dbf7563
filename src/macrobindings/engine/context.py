"""Shared state owned by a single engine instance."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from ..bar_defaults import BarDefaults
from ..errors import LockedMutationError
from ..host import HostEnvironment


PageValue = Union[int, str, None]
PageResponse = Callable[[HostEnvironment, PageValue], PageValue]


@dataclass
class BarPage:
    """Binding template and active page of one bar group."""

    bar_id: int
    template: Optional[str]
    page: PageValue

    def binding_command(self, button: int) -> Optional[str]:
        if not self.template:
            return None
        return self.template % button


@dataclass(frozen=True)
class BindingClaim:
    """Ownership record of a physical key."""

    key: str
    macro_id: int
    action: str


@dataclass
class PageHandler:
    """Page driver registered for a bar group."""

    bar_id: int
    condition: Optional[str] = None
    response: Optional[PageResponse] = None


@dataclass
class EngineContext:
    """Slot map, driver table, claims and bar pages of one engine."""

    defaults: BarDefaults = field(default_factory=BarDefaults.stub)
    bars: Dict[int, BarPage] = field(default_factory=dict)
    slots: Dict[int, int] = field(default_factory=dict)
    drivers: Dict[int, str] = field(default_factory=dict)
    states: Dict[int, Optional[str]] = field(default_factory=dict)
    claims: Dict[str, BindingClaim] = field(default_factory=dict)
    page_handlers: Dict[int, PageHandler] = field(default_factory=dict)

    @property
    def buttons_per_bar(self) -> int:
        return self.defaults.buttons_per_bar

    def locate_slot(self, slot: int) -> Tuple[int, int]:
        """Return the ``(page, button)`` pair addressed by ``slot``."""

        per_bar = self.buttons_per_bar
        page = (slot - 1) // per_bar + 1
        button = (slot - 1) % per_bar + 1
        return page, button

    def page_range(self, page: PageValue) -> range:
        if not isinstance(page, int) or page < 1:
            return range(0)
        low = (page - 1) * self.buttons_per_bar + 1
        return range(low, low + self.buttons_per_bar)

    def slots_for_macro(self, macro_id: int) -> Iterator[int]:
        for slot, slotted in self.slots.items():
            if slotted == macro_id:
                yield slot

    def keys_for_macro(self, macro_id: int) -> Dict[str, str]:
        return {
            key: claim.action
            for key, claim in self.claims.items()
            if claim.macro_id == macro_id
        }

    def ensure_bar(self, bar_id: int) -> BarPage:
        bar = self.bars.get(bar_id)
        if bar is None:
            bar = BarPage(bar_id=bar_id, template=None, page=bar_id)
            self.bars[bar_id] = bar
        return bar


def require_unlocked(host: HostEnvironment, operation: str) -> None:
    """Raise :class:`LockedMutationError` while the host vetoes mutations."""

    if host.is_locked():
        raise LockedMutationError(operation)


__all__ = [
    "BarPage",
    "BindingClaim",
    "EngineContext",
    "PageHandler",
    "PageResponse",
    "PageValue",
    "require_unlocked",
]
