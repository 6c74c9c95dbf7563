"""Active-page tracking for bar groups."""
from __future__ import annotations

import logging
from functools import partial
from importlib import import_module
from typing import Optional, Union

from ..bar_config import validate_template
from ..host import HostEnvironment, normalise_state, page_driver_owner
from .context import (
    EngineContext,
    PageHandler,
    PageResponse,
    PageValue,
    require_unlocked,
)
from .slots import SlotIndex


logger = logging.getLogger(__name__)


def native_page_response(host: HostEnvironment, page: PageValue) -> PageValue:
    """Select the main-bar page the way the stock action bar controller does.

    The driver's own value only signals that a transient mode changed; the
    page is recomputed from the host's bar state.
    """

    state = host.get_bar_state()
    if state.vehicle_bar_index is not None:
        return state.vehicle_bar_index
    if state.override_bar_index is not None:
        return state.override_bar_index
    if state.temp_shapeshift_bar_index is not None:
        return state.temp_shapeshift_bar_index
    if state.bonus_bar_offset > 0:
        return state.bonus_bar_offset + state.num_action_bar_pages
    return state.action_bar_page


def coerce_page(value: Optional[str]) -> PageValue:
    text = normalise_state(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return text


def load_callable(import_path: str) -> PageResponse:
    """Import ``module:attribute`` (or ``module.attribute``) and return it."""

    module_name, attribute_path = _split_import_path(import_path)
    target: object = import_module(module_name)
    for attribute in attribute_path.split("."):
        try:
            target = getattr(target, attribute)
        except AttributeError as exc:
            raise ImportError(
                f"page response '{import_path}' missing attribute '{attribute}'"
            ) from exc
    if not callable(target):
        raise TypeError(
            f"page response '{import_path}' resolved to non-callable {type(target)!r}"
        )
    return target


def _split_import_path(import_path: str) -> tuple[str, str]:
    if ":" in import_path:
        module_name, attribute_path = import_path.split(":", 1)
    else:
        try:
            module_name, attribute_path = import_path.rsplit(".", 1)
        except ValueError as exc:
            raise ValueError("page response must include a module and attribute") from exc
    module_name = module_name.strip()
    attribute_path = attribute_path.strip()
    if not module_name or not attribute_path:
        raise ValueError("page response must specify a module and attribute")
    return module_name, attribute_path


class PageDriver:
    """Registers page drivers and refreshes bar ranges when pages change."""

    def __init__(
        self, context: EngineContext, host: HostEnvironment, slot_index: SlotIndex
    ) -> None:
        self._context = context
        self._host = host
        self._slot_index = slot_index

    def get_page(self, bar_id: int) -> PageValue:
        bar = self._context.bars.get(bar_id)
        return bar.page if bar is not None else None

    def set_page_driver(
        self,
        bar_id: int,
        condition: Optional[str],
        response: Union[PageResponse, str, None] = None,
    ) -> None:
        """Drive the page of ``bar_id`` from ``condition``.

        ``response`` may recompute the page from the driver value; import
        paths are resolved with :func:`load_callable`. A handler without a
        condition only runs when the group's template changes.
        """

        require_unlocked(self._host, "change a page driver")
        if isinstance(response, str):
            response = load_callable(response)
        self._context.ensure_bar(bar_id)
        self._context.page_handlers[bar_id] = PageHandler(
            bar_id=bar_id, condition=condition, response=response
        )
        owner = page_driver_owner(bar_id)
        self._host.unregister_condition_driver(owner)
        if condition is not None:
            self._host.register_condition_driver(
                owner, condition, partial(self._on_page_resolved, bar_id)
            )

    def set_binding_template(self, bar_id: int, template: str) -> None:
        """Swap the group's template and re-run its page logic.

        Raises :class:`~macrobindings.bar_config.BarConfigError` unless the
        template formats exactly one button number.
        """

        template = validate_template(template, bar_id=bar_id)
        require_unlocked(self._host, "change a binding template")
        bar = self._context.ensure_bar(bar_id)
        bar.template = template
        handler = self._context.page_handlers.get(bar_id)
        if handler is None:
            self.apply_page(bar_id, bar_id)
        elif handler.condition is not None:
            self._on_page_resolved(bar_id, self._host.evaluate_options(handler.condition))
        else:
            self._on_page_resolved(bar_id, str(bar_id))

    def apply_page(self, bar_id: int, page: PageValue) -> None:
        """Store ``page`` for the group and rebind both old and new ranges."""

        bar = self._context.ensure_bar(bar_id)
        previous = bar.page
        bar.page = page
        if previous != page:
            logger.info("bar %d switched from page %s to %s", bar_id, previous, page)
        pages = [page] if previous == page else [previous, page]
        self._slot_index.refresh_bars(pages)

    def _on_page_resolved(self, bar_id: int, value: Optional[str]) -> None:
        page = coerce_page(value)
        handler = self._context.page_handlers.get(bar_id)
        if handler is not None and handler.response is not None:
            page = handler.response(self._host, page)
        self.apply_page(bar_id, page)


__all__ = [
    "PageDriver",
    "coerce_page",
    "load_callable",
    "native_page_response",
]
