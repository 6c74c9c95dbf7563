"""Public facade offered to addon authors."""
from __future__ import annotations

import logging
from typing import Optional, Union

from .bar_defaults import BarDefaults
from .engine.context import PageResponse
from .engine.kernel import MacroBindingsEngine
from .host import HostEnvironment, normalise_state
from .parser import ParsedMacro, parse_body


logger = logging.getLogger(__name__)

INTERCEPT_FAILURE_MESSAGE = (
    "Failed to intercept macro binding. "
    "Macro bindings cannot be triggered from mouse clicks."
    "\nCondition called:\n{condition}"
    "\nExpected binding:\n{binding}"
)


class MacroBindings:
    """Entry points for parsing macros and configuring bar pages."""

    def __init__(self, engine: MacroBindingsEngine) -> None:
        self._engine = engine

    @classmethod
    def create(
        cls, host: HostEnvironment, defaults: BarDefaults | None = None
    ) -> "MacroBindings":
        engine = MacroBindingsEngine(host=host, defaults=defaults or BarDefaults.stub())
        return cls(engine)

    @property
    def engine(self) -> MacroBindingsEngine:
        return self._engine

    @property
    def slash_command(self) -> str:
        return self._engine.defaults.slash_command

    def parse_body(self, body: str | None) -> Optional[ParsedMacro]:
        """Parse ``body`` against the host's current binding names."""

        return parse_body(
            body, self._engine.binding_index, slash_command=self.slash_command
        )

    def set_page_driver(
        self,
        bar_id: int,
        condition: Optional[str],
        response: Union[PageResponse, str, None] = None,
    ) -> None:
        """Raises :class:`~macrobindings.errors.LockedMutationError` while locked."""

        self._engine.pages.set_page_driver(bar_id, condition, response)

    def set_binding_template(self, bar_id: int, template: str) -> None:
        """Raises :class:`~macrobindings.errors.LockedMutationError` while locked."""

        self._engine.pages.set_binding_template(bar_id, template)

    def handle_slash_command(self, message: str) -> Optional[str]:
        """Explain why a clicked ``/binding`` macro did nothing.

        Returns the diagnostic shown to the player, or ``None`` when the
        condition selected no binding.
        """

        host = self._engine.host
        result = normalise_state(host.evaluate_options(message))
        if result is None:
            return None
        text = INTERCEPT_FAILURE_MESSAGE.format(
            condition=message, binding=host.get_binding_name(result)
        )
        logger.warning("macro binding %s invoked directly", result)
        host.print_message(text)
        return text


__all__ = ["INTERCEPT_FAILURE_MESSAGE", "MacroBindings"]
