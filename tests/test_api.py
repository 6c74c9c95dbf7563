"""Behaviour of the public facade."""
from __future__ import annotations

import pytest

from macrobindings.api import INTERCEPT_FAILURE_MESSAGE, MacroBindings
from macrobindings.errors import LockedMutationError
from macrobindings.runtime.simulated_host import SimulatedHost


def _api(**host_kwargs: object) -> tuple[SimulatedHost, MacroBindings]:
    host = SimulatedHost(
        binding_commands=[("FOCUSTARGET", "Focus Target"), ("JUMP", "Jump")],
        **host_kwargs,
    )
    return host, MacroBindings.create(host)


def test_parse_body_resolves_display_names() -> None:
    _, api = _api()

    parsed = api.parse_body("/binding [harm] Focus Target; Jump")

    assert parsed is not None
    assert parsed.expression == "[harm] FOCUSTARGET; JUMP"
    assert api.parse_body("/cast Fireball") is None
    assert api.slash_command == "/binding"


def test_handle_slash_command_reports_the_intercepted_binding() -> None:
    host, api = _api(flags={"harm"})

    text = api.handle_slash_command("[harm] FOCUSTARGET; nil")

    assert text == INTERCEPT_FAILURE_MESSAGE.format(
        condition="[harm] FOCUSTARGET; nil", binding="Focus Target"
    )
    assert "Macro bindings cannot be triggered from mouse clicks." in text
    assert host.messages == [text]


def test_handle_slash_command_is_silent_when_nothing_is_selected() -> None:
    host, api = _api()

    assert api.handle_slash_command("[harm] FOCUSTARGET; nil") is None
    assert api.handle_slash_command("[harm] FOCUSTARGET") is None
    assert host.messages == []


def test_facade_page_configuration_respects_lockdown() -> None:
    host, api = _api()
    host.lock()

    with pytest.raises(LockedMutationError):
        api.set_binding_template(3, "MYBAR%d")
    with pytest.raises(LockedMutationError):
        api.set_page_driver(3, "[mod:ctrl] 7; 3")

    host.unlock()
    api.set_binding_template(3, "MYBAR%d")
    assert api.engine.context.bars[3].template == "MYBAR%d"
