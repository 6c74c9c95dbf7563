"""Parse ``/binding`` command lines out of macro bodies."""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Protocol, Tuple

from .host import NO_BINDING


DEFAULT_SLASH_COMMAND = "/binding"

_SEGMENT_PATTERN = re.compile(
    r"(?P<predicate>(?:\[[^\[\]\n]*\][ \t]*)+)(?P<action>[^;\[\n]*)"
)
_DEFAULT_PATTERN = re.compile(r"[^;\s]+")


class BindingRegistrySource(Protocol):
    """Subset of the host binding registry needed to resolve display names."""

    def get_num_bindings(self) -> int:
        ...

    def get_binding(self, index: int) -> str:
        ...

    def get_binding_name(self, command: str) -> str:
        ...


@dataclass(frozen=True)
class Condition:
    """A single ``[predicate] action`` pair lifted from a command line."""

    predicate: str
    action: str

    def __str__(self) -> str:
        return f"{self.predicate} {self.action}"


@dataclass(frozen=True)
class ParsedMacro:
    """Ordered conditions plus the fallback action of one macro body."""

    conditions: Tuple[Condition, ...]
    default: str = NO_BINDING

    @property
    def expression(self) -> str:
        """Render the host driver expression, conditions first."""

        parts = [str(condition) for condition in self.conditions]
        parts.append(self.default)
        return "; ".join(parts)


class BindingNameIndex:
    """Display name to command lookup, rebuilt when the registry size changes."""

    def __init__(self, source: BindingRegistrySource | None = None) -> None:
        self._source = source
        self._names: Dict[str, str] = {}
        self._indexed_count = 0

    @property
    def indexed_count(self) -> int:
        return self._indexed_count

    def refresh(self) -> None:
        source = self._source
        if source is None:
            return
        count = source.get_num_bindings()
        if count == self._indexed_count:
            return
        names: Dict[str, str] = {}
        for index in range(1, count + 1):
            command = source.get_binding(index)
            names[source.get_binding_name(command)] = command
        self._names = names
        self._indexed_count = count

    def resolve(self, token: str) -> str:
        """Return the command for ``token`` or ``token`` itself when unknown."""

        self.refresh()
        return self._names.get(token, token)


@lru_cache(maxsize=8)
def _command_pattern(slash_command: str) -> re.Pattern[str]:
    return re.compile(
        rf"^[ \t]*{re.escape(slash_command)}[ \t]+(?P<body>[^\r\n]*)\r?$",
        re.MULTILINE,
    )


def parse_body(
    body: str | None,
    binding_index: BindingNameIndex | None = None,
    *,
    slash_command: str = DEFAULT_SLASH_COMMAND,
) -> Optional[ParsedMacro]:
    """Return the parsed binding conditions of ``body``.

    Lines are scanned in order and segments left to right, so earlier
    segments take priority. ``None`` means the body holds no command line
    and no driver should exist for it.
    """

    if not body:
        return None
    resolve = binding_index.resolve if binding_index is not None else _passthrough

    matched = False
    default: str | None = None
    conditions: list[Condition] = []
    for line_match in _command_pattern(slash_command).finditer(body):
        line = line_match.group("body").strip()
        if not line:
            continue
        matched = True
        for segment in _SEGMENT_PATTERN.finditer(line):
            action = segment.group("action").strip()
            if not action:
                continue
            predicate = segment.group("predicate").strip()
            conditions.append(Condition(predicate=predicate, action=resolve(action)))
        if default is None:
            remainder = _SEGMENT_PATTERN.sub("", line)
            fallback = _DEFAULT_PATTERN.search(remainder)
            if fallback is not None:
                default = resolve(fallback.group(0))

    if not matched:
        return None
    return ParsedMacro(conditions=tuple(conditions), default=default or NO_BINDING)


def _passthrough(token: str) -> str:
    return token


__all__ = [
    "BindingNameIndex",
    "BindingRegistrySource",
    "Condition",
    "DEFAULT_SLASH_COMMAND",
    "ParsedMacro",
    "parse_body",
]
