"""Command-line helpers for parsing macros and replaying host scenarios."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Any, Callable, Dict, Mapping, Sequence

import tomllib

from ..api import MacroBindings
from ..bar_config import describe_bar_config, load_bar_config
from ..bar_defaults import BarDefaults
from ..host import MACRO_ACTION_KIND, ActionInfo
from ..parser import ParsedMacro
from .simulated_host import SimulatedHost


class ScenarioError(ValueError):
    """Raised when a replay scenario cannot be interpreted."""


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed arguments for the macrobindings CLI."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML file overriding bar templates and page drivers",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="Logging verbosity (default: WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Parse a macro body file")
    parse_cmd.add_argument(
        "macro", help="File holding the macro body, or '-' to read standard input"
    )

    replay_cmd = commands.add_parser("replay", help="Replay a TOML host scenario")
    replay_cmd.add_argument("scenario", type=Path, help="Scenario TOML file")

    commands.add_parser("bars", help="Show the configured bar groups")
    return parser.parse_args(argv)


def serialise_parsed(parsed: ParsedMacro | None) -> Dict[str, object] | None:
    if parsed is None:
        return None
    return {
        "conditions": [
            {"predicate": condition.predicate, "action": condition.action}
            for condition in parsed.conditions
        ],
        "default": parsed.default,
        "expression": parsed.expression,
    }


def build_host(scenario: Mapping[str, Any]) -> SimulatedHost:
    """Seed a :class:`SimulatedHost` from the scenario's static tables."""

    host = SimulatedHost()
    for entry in scenario.get("bindings", ()):
        if not isinstance(entry, Mapping) or "command" not in entry:
            raise ScenarioError("[[bindings]] entries need a command")
        command = str(entry["command"])
        host.binding_commands.append((command, str(entry.get("name", command))))
        keys = entry.get("keys", ())
        if isinstance(keys, str):
            keys = (keys,)
        host.binding_keys[command] = [str(key) for key in keys]
    for raw_id, body in scenario.get("macros", {}).items():
        host.macros[int(raw_id)] = str(body)
    for raw_slot, macro_id in scenario.get("slots", {}).items():
        host.actions[int(raw_slot)] = _macro_action(macro_id)
    host.flags.update(scenario.get("flags", ()))
    return host


def replay_scenario(
    scenario: Mapping[str, Any], defaults: BarDefaults | None = None
) -> Dict[str, object]:
    """Run every step of ``scenario`` and report the resulting bindings."""

    host = build_host(scenario)
    api = MacroBindings.create(host, defaults)
    host.login()
    host.run_idle()
    for index, step in enumerate(scenario.get("steps", ()), start=1):
        if not isinstance(step, Mapping) or "action" not in step:
            raise ScenarioError(f"step {index} must be a table with an action")
        runner = _STEP_RUNNERS.get(step["action"])
        if runner is None:
            raise ScenarioError(f"step {index} has unknown action {step['action']!r}")
        runner(host, api, step)
    return {
        "bindings": dict(sorted(host.applied.items())),
        "pending": len(api.engine.dispatcher.pending),
        "messages": list(host.messages),
    }


def _macro_action(macro_id: Any) -> ActionInfo:
    return ActionInfo(kind=MACRO_ACTION_KIND, identifier=int(macro_id))


def _step_flags(host: SimulatedHost, api: MacroBindings, step: Mapping[str, Any]) -> None:
    host.set_flags(enable=step.get("enable", ()), disable=step.get("disable", ()))


def _step_bar_state(host: SimulatedHost, api: MacroBindings, step: Mapping[str, Any]) -> None:
    changes = {key: value for key, value in step.items() if key != "action"}
    host.set_bar_state(**changes)


def _step_template(host: SimulatedHost, api: MacroBindings, step: Mapping[str, Any]) -> None:
    api.set_binding_template(int(step["bar"]), str(step["template"]))


def _step_page_driver(host: SimulatedHost, api: MacroBindings, step: Mapping[str, Any]) -> None:
    api.set_page_driver(int(step["bar"]), step.get("condition"), step.get("response"))


def _step_slash(host: SimulatedHost, api: MacroBindings, step: Mapping[str, Any]) -> None:
    api.handle_slash_command(str(step["message"]))


_STEP_RUNNERS: Mapping[str, Callable[[SimulatedHost, MacroBindings, Mapping[str, Any]], None]] = {
    "lock": lambda host, api, step: host.lock(),
    "unlock": lambda host, api, step: host.unlock(),
    "idle": lambda host, api, step: host.run_idle(),
    "place": lambda host, api, step: host.place_macro(int(step["slot"]), int(step["macro"])),
    "place_action": lambda host, api, step: host.place_action(
        int(step["slot"]), str(step["kind"]), step["id"]
    ),
    "clear_slot": lambda host, api, step: host.clear_slot(int(step["slot"])),
    "set_macro": lambda host, api, step: host.set_macro(int(step["macro"]), step.get("body")),
    "bind_key": lambda host, api, step: host.bind_key(str(step["command"]), str(step["key"])),
    "flags": _step_flags,
    "bar_state": _step_bar_state,
    "template": _step_template,
    "page_driver": _step_page_driver,
    "slash": _step_slash,
}


def _read_macro(source: str, stdin: IO[str]) -> str:
    if source == "-":
        return stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: IO[str] = sys.stdin,
    stdout: IO[str] = sys.stdout,
) -> int:
    """Entry point for ``python -m macrobindings.runtime.cli``."""

    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    defaults = load_bar_config(args.config) if args.config else BarDefaults.stub()

    if args.command == "parse":
        api = MacroBindings.create(SimulatedHost(), defaults)
        payload: object = serialise_parsed(api.parse_body(_read_macro(args.macro, stdin)))
    elif args.command == "replay":
        with args.scenario.open("rb") as stream:
            scenario = tomllib.load(stream)
        payload = replay_scenario(scenario, defaults)
    else:
        payload = list(describe_bar_config(defaults))

    stdout.write(json.dumps(payload, indent=2, sort_keys=True))
    stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())


__all__ = [
    "ScenarioError",
    "build_host",
    "main",
    "parse_args",
    "replay_scenario",
    "serialise_parsed",
]
