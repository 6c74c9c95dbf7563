"""Track which macro occupies each action-bar slot."""
from __future__ import annotations

from typing import Iterable, Optional, Set

from ..host import HostEnvironment
from .context import EngineContext, PageValue
from .synchronizer import BindingSynchronizer


class SlotIndex:
    """Sole writer of the slot to macro map."""

    def __init__(
        self,
        context: EngineContext,
        host: HostEnvironment,
        synchronizer: BindingSynchronizer,
    ) -> None:
        self._context = context
        self._host = host
        self._synchronizer = synchronizer

    def get_macro_in_slot(self, slot: int) -> Optional[int]:
        return self._context.slots.get(slot)

    def get_bar_range(self, page: PageValue) -> range:
        return self._context.page_range(page)

    def get_current_macro_in_slot(self, slot: int) -> Optional[int]:
        """Ask the host for the slot occupant; only driven macros count."""

        info = self._host.get_action_info(slot)
        if info is None or not info.is_macro:
            return None
        macro_id = info.identifier
        if not isinstance(macro_id, int) or macro_id not in self._context.drivers:
            return None
        return macro_id

    def reindex_slot(self, slot: int) -> Optional[int]:
        macro_id = self.get_current_macro_in_slot(slot)
        if macro_id is None:
            self._context.slots.pop(slot, None)
        else:
            self._context.slots[slot] = macro_id
        return macro_id

    def reindex_bar(self, bar_id: int) -> None:
        bar = self._context.bars.get(bar_id)
        if bar is None:
            return
        for slot in self.get_bar_range(bar.page):
            self.reindex_slot(slot)

    def reindex_all(self) -> None:
        """Rebuild the slot map and every affected macro's bindings."""

        previous: Set[int] = set(self._context.slots.values())
        self._context.slots.clear()
        for bar_id in sorted(self._context.bars):
            self.reindex_bar(bar_id)
        self._synchronizer.refresh_macros(previous | set(self._context.slots.values()))

    def refresh_slot(self, slot: int) -> None:
        """Handle a live slot change, rebinding the dislodged and placed macros."""

        old_macro = self._context.slots.get(slot)
        new_macro = self.reindex_slot(slot)
        if old_macro == new_macro:
            return
        self._synchronizer.refresh_macros(
            macro_id for macro_id in (old_macro, new_macro) if macro_id is not None
        )

    def refresh_bars(self, pages: Iterable[PageValue]) -> None:
        """Reindex every slot shown on ``pages`` and rebind the macros found."""

        touched: Set[int] = set()
        for page in pages:
            for slot in self.get_bar_range(page):
                old_macro = self._context.slots.get(slot)
                new_macro = self.reindex_slot(slot)
                touched.update(
                    macro_id for macro_id in (old_macro, new_macro) if macro_id is not None
                )
        self._synchronizer.refresh_macros(touched)

    def refresh_bar(self, page: PageValue) -> None:
        self.refresh_bars((page,))


__all__ = ["SlotIndex"]
