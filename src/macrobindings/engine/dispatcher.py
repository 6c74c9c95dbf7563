"""Route host notifications, deferring them while bindings are locked."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Tuple

from ..host import EventKind, HostEnvironment


logger = logging.getLogger(__name__)

EventHandler = Callable[..., None]


@dataclass(frozen=True)
class PendingEvent:
    """Notification held back until the lock lifts."""

    kind: EventKind
    args: Tuple[object, ...] = ()


class EventDispatcher:
    """Dispatch notifications immediately or queue them during lockdown.

    Queued notifications are deduplicated on kind and arguments and are
    replayed in arrival order when :attr:`EventKind.LOCK_LIFTED` arrives.
    """

    def __init__(
        self,
        host: HostEnvironment,
        handlers: Mapping[EventKind, EventHandler] | None = None,
    ) -> None:
        self._host = host
        self._handlers: Dict[EventKind, EventHandler] = {
            EventKind.LOCK_LIFTED: self.drain,
        }
        if handlers:
            self._handlers.update(handlers)
        self._pending: List[PendingEvent] = []

    @property
    def pending(self) -> Tuple[PendingEvent, ...]:
        return tuple(self._pending)

    def register_handler(self, kind: EventKind, handler: EventHandler) -> None:
        self._handlers[kind] = handler

    def dispatch(self, kind: EventKind, *args: object) -> bool:
        """Run the handler for ``kind`` now; return ``False`` when deferred."""

        if self._host.is_locked():
            self._enqueue(PendingEvent(kind=kind, args=tuple(args)))
            return False
        handler = self._handlers.get(kind)
        if handler is None:
            logger.debug("no handler for %s", kind.name)
            return True
        handler(*args)
        return True

    def drain(self) -> None:
        """Replay queued notifications in arrival order.

        When a handler raises, the notifications behind it are queued again
        ahead of any queued meanwhile before the exception propagates.
        """

        pending, self._pending = self._pending, []
        if pending:
            logger.debug("replaying %d deferred events", len(pending))
        replayed = 0
        try:
            for event in pending:
                replayed += 1
                self.dispatch(event.kind, *event.args)
        finally:
            remaining = pending[replayed:]
            if remaining:
                logger.debug("requeueing %d events after a failed replay", len(remaining))
                self._pending = remaining + [
                    event for event in self._pending if event not in remaining
                ]

    def _enqueue(self, event: PendingEvent) -> None:
        if event in self._pending:
            return
        logger.debug("deferring %s%r", event.kind.name, event.args)
        self._pending.append(event)


class IdleDebouncer:
    """Collapse repeated triggers into one callback at the next idle moment."""

    def __init__(self, host: HostEnvironment, callback: Callable[[], None]) -> None:
        self._host = host
        self._callback = callback
        self._scheduled = False

    @property
    def scheduled(self) -> bool:
        return self._scheduled

    def trigger(self) -> None:
        if self._scheduled:
            return
        self._scheduled = True
        self._host.schedule_idle(self._run)

    def _run(self) -> None:
        # Release the latch first so triggers raised by the callback schedule anew.
        self._scheduled = False
        self._callback()


__all__ = [
    "EventDispatcher",
    "EventHandler",
    "EventKind",
    "IdleDebouncer",
    "PendingEvent",
]
