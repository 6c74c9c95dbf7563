"""End-to-end checks for the macrobindings command line."""
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from macrobindings.runtime.cli import (
    ScenarioError,
    build_host,
    main,
    parse_args,
    replay_scenario,
)


SCENARIO = """
flags = ["harm"]

[[bindings]]
command = "ACTIONBUTTON1"
name = "Action Button 1"
keys = ["1"]

[[bindings]]
command = "MULTIACTIONBAR3BUTTON1"
keys = "F1"

[macros]
1 = "/binding [combat] JUMP; SITORSTAND"

[slots]
1 = 1

[[steps]]
action = "flags"
enable = ["combat"]

[[steps]]
action = "place"
slot = 25
macro = 1

[[steps]]
action = "lock"

[[steps]]
action = "set_macro"
macro = 1
body = "/binding FOCUSTARGET"

[[steps]]
action = "slash"
message = "[harm] ACTIONBUTTON1"
"""


def _run(argv: list[str], stdin: str = "") -> object:
    stdout = io.StringIO()
    assert main(argv, stdin=io.StringIO(stdin), stdout=stdout) == 0
    return json.loads(stdout.getvalue())


def test_parse_args_defaults() -> None:
    args = parse_args(["bars"])

    assert args.command == "bars"
    assert args.config is None
    assert args.log_level == "WARNING"


def test_parse_reads_standard_input() -> None:
    payload = _run(["parse", "-"], stdin="/binding [combat] JUMP; SITORSTAND\n")

    assert payload == {
        "conditions": [{"predicate": "[combat]", "action": "JUMP"}],
        "default": "SITORSTAND",
        "expression": "[combat] JUMP; SITORSTAND",
    }


def test_parse_reports_bodies_without_command_lines(tmp_path: Path) -> None:
    macro_path = tmp_path / "macro.txt"
    macro_path.write_text("/cast Fireball\n", encoding="utf-8")

    assert _run(["parse", str(macro_path)]) is None


def test_replay_reports_bindings_and_deferred_events(tmp_path: Path) -> None:
    scenario_path = tmp_path / "scenario.toml"
    scenario_path.write_text(SCENARIO, encoding="utf-8")

    payload = _run(["replay", str(scenario_path)])

    assert payload["bindings"] == {"1": "JUMP", "F1": "JUMP"}
    assert payload["pending"] == 1
    assert len(payload["messages"]) == 1
    assert "Action Button 1" in payload["messages"][0]


def test_bars_honours_config_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "bars.toml"
    config_path.write_text('[bars]\n3 = false\n20 = "MYBAR%d"\n', encoding="utf-8")

    rows = _run(["--config", str(config_path), "bars"])

    bars = [row["bar"] for row in rows]
    assert 3 not in bars
    assert bars[-1] == 20
    assert rows[0]["bar"] == 1


def test_build_host_seeds_tables() -> None:
    host = build_host(
        {
            "bindings": [{"command": "JUMP", "name": "Jump", "keys": ["SPACE"]}],
            "macros": {"4": "/binding JUMP"},
            "slots": {"2": 4},
        }
    )

    assert host.get_binding_name("JUMP") == "Jump"
    assert host.get_binding_keys("JUMP") == ("SPACE",)
    assert host.get_macro_body(4) == "/binding JUMP"
    action = host.get_action_info(2)
    assert action is not None and action.is_macro and action.identifier == 4


@pytest.mark.parametrize(
    "scenario",
    [
        {"steps": [{"action": "teleport"}]},
        {"steps": ["lock"]},
        {"bindings": [{"name": "Jump"}]},
    ],
)
def test_replay_rejects_malformed_scenarios(scenario: dict) -> None:
    with pytest.raises(ScenarioError):
        replay_scenario(scenario)
