"""Per-macro condition drivers registered with the host."""
from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from ..host import HostEnvironment, macro_driver_owner
from ..parser import BindingNameIndex, parse_body
from .context import EngineContext, require_unlocked
from .synchronizer import BindingSynchronizer


logger = logging.getLogger(__name__)


class DriverTable:
    """Keeps at most one host condition driver per macro."""

    def __init__(
        self,
        context: EngineContext,
        host: HostEnvironment,
        synchronizer: BindingSynchronizer,
        binding_index: BindingNameIndex | None = None,
    ) -> None:
        self._context = context
        self._host = host
        self._synchronizer = synchronizer
        self._binding_index = binding_index or BindingNameIndex(host)

    @property
    def binding_index(self) -> BindingNameIndex:
        return self._binding_index

    def has_driver(self, macro_id: int) -> bool:
        return macro_id in self._context.drivers

    def get_expression(self, macro_id: int) -> Optional[str]:
        return self._context.drivers.get(macro_id)

    def add_driver(self, macro_id: int, expression: str) -> None:
        """Register ``expression`` for ``macro_id``, replacing any prior driver."""

        require_unlocked(self._host, "add a macro driver")
        owner = macro_driver_owner(macro_id)
        if macro_id in self._context.drivers:
            self._host.unregister_condition_driver(owner)
        self._context.drivers[macro_id] = expression
        logger.debug("driver for macro %d: %s", macro_id, expression)
        self._host.register_condition_driver(
            owner, expression, partial(self._on_state_resolved, macro_id)
        )

    def remove_driver(self, macro_id: int) -> None:
        require_unlocked(self._host, "remove a macro driver")
        if self._context.drivers.pop(macro_id, None) is None:
            return
        self._host.unregister_condition_driver(macro_driver_owner(macro_id))
        self._context.states.pop(macro_id, None)
        self._synchronizer.clear_bindings_for_macro(macro_id)

    def remove_all_drivers(self) -> None:
        """Drop every driver along with all applied bindings and claims."""

        require_unlocked(self._host, "remove macro drivers")
        self._synchronizer.clear_all_bindings()
        for macro_id in list(self._context.drivers):
            self._host.unregister_condition_driver(macro_driver_owner(macro_id))
        self._context.drivers.clear()
        self._context.states.clear()

    def refresh_from_macros(self) -> int:
        """Re-derive every driver from the host's macro bodies.

        Returns the number of drivers registered.
        """

        self.remove_all_drivers()
        defaults = self._context.defaults
        for macro_id in range(1, defaults.max_macros + 1):
            parsed = parse_body(
                self._host.get_macro_body(macro_id),
                self._binding_index,
                slash_command=defaults.slash_command,
            )
            if parsed is not None:
                self.add_driver(macro_id, parsed.expression)
        return len(self._context.drivers)

    def _on_state_resolved(self, macro_id: int, value: Optional[str]) -> None:
        # The host may still hold a callback for a driver removed mid-dispatch.
        if macro_id not in self._context.drivers:
            return
        self._synchronizer.set_state_for_macro(macro_id, value)


__all__ = ["DriverTable"]
