"""Engine kernel that wires the binding components to a host."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..bar_defaults import BarDefaults
from ..host import EventKind, HostEnvironment
from ..parser import BindingNameIndex
from .context import BarPage, EngineContext
from .dispatcher import EventDispatcher, IdleDebouncer
from .drivers import DriverTable
from .pages import PageDriver
from .slots import SlotIndex
from .synchronizer import BindingSynchronizer


logger = logging.getLogger(__name__)


@dataclass
class MacroBindingsEngine:
    """Own the engine context and route host notifications through it."""

    host: HostEnvironment
    defaults: BarDefaults = field(default_factory=BarDefaults.stub)
    context: EngineContext = field(init=False)
    binding_index: BindingNameIndex = field(init=False)
    synchronizer: BindingSynchronizer = field(init=False)
    slot_index: SlotIndex = field(init=False)
    drivers: DriverTable = field(init=False)
    pages: PageDriver = field(init=False)
    dispatcher: EventDispatcher = field(init=False)
    _registry_refresh: IdleDebouncer = field(init=False)

    def __post_init__(self) -> None:
        self.context = EngineContext(defaults=self.defaults)
        for bar_id, template in self.defaults.bar_templates.items():
            self.context.bars[bar_id] = BarPage(bar_id=bar_id, template=template, page=bar_id)
        self.binding_index = BindingNameIndex(self.host)
        self.synchronizer = BindingSynchronizer(self.context, self.host)
        self.slot_index = SlotIndex(self.context, self.host, self.synchronizer)
        self.drivers = DriverTable(
            self.context, self.host, self.synchronizer, self.binding_index
        )
        self.pages = PageDriver(self.context, self.host, self.slot_index)
        self.dispatcher = EventDispatcher(self.host)
        self._registry_refresh = IdleDebouncer(self.host, self._on_registry_settled)
        self.dispatcher.register_handler(EventKind.MACROS_CHANGED, self.handle_macros_changed)
        self.dispatcher.register_handler(EventKind.BINDINGS_CHANGED, self._registry_refresh.trigger)
        self.dispatcher.register_handler(EventKind.SLOT_CHANGED, self.slot_index.refresh_slot)
        self.dispatcher.register_handler(EventKind.LOGIN, self.slot_index.reindex_all)
        for page_driver in self.defaults.page_drivers:
            self.pages.set_page_driver(
                page_driver.bar_id, page_driver.condition, page_driver.response
            )
        self.host.subscribe(self.dispatch)

    def dispatch(self, kind: EventKind, *args: object) -> bool:
        return self.dispatcher.dispatch(kind, *args)

    def handle_macros_changed(self) -> None:
        """Re-derive every macro driver, then reindex all bars."""

        count = self.drivers.refresh_from_macros()
        logger.debug("%d macro drivers registered", count)
        self.slot_index.reindex_all()

    @property
    def registry_refresh_pending(self) -> bool:
        return self._registry_refresh.scheduled

    def _on_registry_settled(self) -> None:
        # Routed through the dispatcher so a lock raised meanwhile defers it.
        self.dispatcher.dispatch(EventKind.MACROS_CHANGED)


__all__ = ["MacroBindingsEngine"]
