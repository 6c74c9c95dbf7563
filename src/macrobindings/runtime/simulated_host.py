"""Deterministic in-memory host used by tests and the replay CLI."""
from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..host import (
    ActionInfo,
    BarState,
    DriverCallback,
    EventKind,
    EventListener,
    IdleCallback,
    MACRO_ACTION_KIND,
)


_BRACKET_GROUP = re.compile(r"\[([^\[\]]*)\]")


@dataclass
class _Driver:
    expression: str
    callback: DriverCallback
    value: Optional[str] = None


@dataclass
class SimulatedHost:
    """Host double implementing :class:`~macrobindings.host.HostEnvironment`.

    Condition expressions use the host option syntax: ``;`` separated
    clauses, each an optional run of ``[...]`` groups followed by a value.
    A group matches when all of its comma separated atoms hold; any group
    matching selects the clause. An atom holds when it is an active flag,
    when it is ``no<flag>`` for an inactive flag, or when it names a unit
    (``@target``).
    """

    macros: Dict[int, str] = field(default_factory=dict)
    binding_commands: List[Tuple[str, str]] = field(default_factory=list)
    binding_keys: Dict[str, List[str]] = field(default_factory=dict)
    actions: Dict[int, ActionInfo] = field(default_factory=dict)
    flags: Set[str] = field(default_factory=set)
    bar_state: BarState = field(default_factory=BarState)
    locked: bool = False
    applied: Dict[str, str] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)
    _drivers: Dict[str, _Driver] = field(init=False, default_factory=dict)
    _idle: Deque[IdleCallback] = field(init=False, default_factory=deque)
    _listeners: List[EventListener] = field(init=False, default_factory=list)

    # Host protocol ---------------------------------------------------------

    def get_macro_body(self, macro_id: int) -> str | None:
        return self.macros.get(macro_id)

    def get_num_bindings(self) -> int:
        return len(self.binding_commands)

    def get_binding(self, index: int) -> str:
        return self.binding_commands[index - 1][0]

    def get_binding_name(self, command: str) -> str:
        for known, name in self.binding_commands:
            if known == command:
                return name
        return command

    def get_binding_keys(self, command: str) -> Sequence[str]:
        return tuple(self.binding_keys.get(command, ()))

    def get_action_info(self, slot: int) -> ActionInfo | None:
        return self.actions.get(slot)

    def is_locked(self) -> bool:
        return self.locked

    def apply_binding(self, key: str, action: str | None) -> None:
        if action is None:
            self.applied.pop(key, None)
        else:
            self.applied[key] = action

    def register_condition_driver(
        self, owner: str, expression: str, callback: DriverCallback
    ) -> None:
        driver = _Driver(expression=expression, callback=callback)
        self._drivers[owner] = driver
        driver.value = self.evaluate_options(expression)
        callback(driver.value)

    def unregister_condition_driver(self, owner: str) -> None:
        self._drivers.pop(owner, None)

    def evaluate_options(self, expression: str) -> str | None:
        for clause in expression.split(";"):
            text = clause.strip()
            groups = []
            while True:
                match = _BRACKET_GROUP.match(text)
                if match is None:
                    break
                groups.append(match.group(1))
                text = text[match.end():].lstrip()
            if not groups or any(self._group_holds(group) for group in groups):
                return text or None
        return None

    def get_bar_state(self) -> BarState:
        return self.bar_state

    def schedule_idle(self, callback: IdleCallback) -> None:
        self._idle.append(callback)

    def print_message(self, text: str) -> None:
        self.messages.append(text)

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # Scenario controls -----------------------------------------------------

    @property
    def driver_owners(self) -> Tuple[str, ...]:
        return tuple(self._drivers)

    @property
    def idle_pending(self) -> int:
        return len(self._idle)

    def emit(self, kind: EventKind, *args: object) -> None:
        for listener in list(self._listeners):
            listener(kind, *args)

    def login(self) -> None:
        self.emit(EventKind.MACROS_CHANGED)
        self.emit(EventKind.LOGIN)

    def run_idle(self) -> int:
        """Run queued idle callbacks, including ones they schedule."""

        count = 0
        while self._idle:
            callback = self._idle.popleft()
            callback()
            count += 1
        return count

    def lock(self) -> None:
        self.locked = True

    def unlock(self) -> None:
        self.locked = False
        self.emit(EventKind.LOCK_LIFTED)

    def set_macro(self, macro_id: int, body: str | None) -> None:
        if body is None:
            self.macros.pop(macro_id, None)
        else:
            self.macros[macro_id] = body
        self.emit(EventKind.MACROS_CHANGED)

    def add_binding(self, command: str, name: str | None = None) -> None:
        self.binding_commands.append((command, name or command))
        self.emit(EventKind.BINDINGS_CHANGED)

    def bind_key(self, command: str, key: str) -> None:
        keys = self.binding_keys.setdefault(command, [])
        if key not in keys:
            keys.append(key)
        self.emit(EventKind.BINDINGS_CHANGED)

    def place_macro(self, slot: int, macro_id: int) -> None:
        self.place_action(slot, MACRO_ACTION_KIND, macro_id)

    def place_action(self, slot: int, kind: str, identifier: int | str) -> None:
        self.actions[slot] = ActionInfo(kind=kind, identifier=identifier)
        self.emit(EventKind.SLOT_CHANGED, slot)

    def clear_slot(self, slot: int) -> None:
        self.actions.pop(slot, None)
        self.emit(EventKind.SLOT_CHANGED, slot)

    def set_flags(
        self, enable: Iterable[str] = (), disable: Iterable[str] = ()
    ) -> None:
        """Toggle flags and re-evaluate drivers whose value changed."""

        self.flags.update(enable)
        self.flags.difference_update(disable)
        self._reevaluate()

    def set_bar_state(self, **changes: object) -> None:
        self.bar_state = replace(self.bar_state, **changes)
        self._reevaluate(force=True)

    def _reevaluate(self, *, force: bool = False) -> None:
        for owner in list(self._drivers):
            driver = self._drivers.get(owner)
            if driver is None:
                continue
            value = self.evaluate_options(driver.expression)
            if value != driver.value or force:
                driver.value = value
                driver.callback(value)

    def _group_holds(self, group: str) -> bool:
        for raw_atom in group.split(","):
            atom = raw_atom.strip()
            if not atom or atom.startswith("@"):
                continue
            if atom in self.flags:
                continue
            if atom.startswith("no") and atom[2:] not in self.flags:
                continue
            return False
        return True


__all__ = ["SimulatedHost"]
