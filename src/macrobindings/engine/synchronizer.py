"""Apply and release physical key bindings on behalf of macros."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from ..host import HostEnvironment, normalise_state
from .context import BindingClaim, EngineContext


logger = logging.getLogger(__name__)


class BindingSynchronizer:
    """Sole writer of the claim map.

    Bindings for a macro are always recomputed from the complete slot map,
    so a macro placed in several slots keeps every key those slots resolve
    to no matter which slot triggered the refresh.
    """

    def __init__(self, context: EngineContext, host: HostEnvironment) -> None:
        self._context = context
        self._host = host

    def set_state_for_macro(self, macro_id: int, state: Optional[str]) -> None:
        """Store the resolved driver value and rebuild the macro's bindings."""

        resolved = normalise_state(state)
        self._context.states[macro_id] = resolved
        self.set_bindings_for_macro(macro_id, resolved)

    def set_bindings_for_macro(self, macro_id: int, state: Optional[str]) -> None:
        """Release the macro's keys and claim every key its slots resolve to."""

        self.clear_bindings_for_macro(macro_id)
        if state is None:
            return
        for slot in sorted(self._context.slots_for_macro(macro_id)):
            for command in self.binding_commands_for_slot(slot):
                for key in self._host.get_binding_keys(command):
                    self._claim(key, macro_id, state)

    def clear_bindings_for_macro(self, macro_id: int) -> None:
        released = [
            key
            for key, claim in self._context.claims.items()
            if claim.macro_id == macro_id
        ]
        for key in released:
            del self._context.claims[key]
            self._host.apply_binding(key, None)
        if released:
            logger.debug("released %s for macro %d", released, macro_id)

    def clear_all_bindings(self) -> None:
        for key in list(self._context.claims):
            self._host.apply_binding(key, None)
        self._context.claims.clear()

    def refresh_macros(self, macro_ids: Iterable[int]) -> None:
        """Recompute bindings for each macro from its stored state."""

        for macro_id in sorted(set(macro_ids)):
            self.set_bindings_for_macro(macro_id, self._context.states.get(macro_id))

    def binding_commands_for_slot(self, slot: int) -> Tuple[str, ...]:
        """Return the binding commands of every group displaying ``slot``."""

        page, button = self._context.locate_slot(slot)
        commands = []
        for bar in self._context.bars.values():
            if bar.page != page:
                continue
            command = bar.binding_command(button)
            if command is not None and command not in commands:
                commands.append(command)
        return tuple(commands)

    def keys_for_macro(self, macro_id: int) -> Dict[str, str]:
        return self._context.keys_for_macro(macro_id)

    def _claim(self, key: str, macro_id: int, action: str) -> None:
        previous = self._context.claims.get(key)
        if previous is not None and previous.macro_id != macro_id:
            logger.debug(
                "key %s moves from macro %d to macro %d", key, previous.macro_id, macro_id
            )
        self._context.claims[key] = BindingClaim(key=key, macro_id=macro_id, action=action)
        self._host.apply_binding(key, action)


__all__ = ["BindingSynchronizer"]
