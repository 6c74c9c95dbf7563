"""Binding synchronisation across slots, claims and condition changes."""
from __future__ import annotations

from macrobindings.engine import MacroBindingsEngine
from macrobindings.runtime.simulated_host import SimulatedHost


def _bootstrap(macros: dict[int, str]) -> tuple[SimulatedHost, MacroBindingsEngine]:
    host = SimulatedHost(
        macros=dict(macros),
        binding_commands=[
            ("JUMP", "Jump"),
            ("FOCUSTARGET", "Focus Target"),
            ("SITORSTAND", "Sit/Move Down"),
        ],
        binding_keys={
            "ACTIONBUTTON1": ["1"],
            "ACTIONBUTTON2": ["2", "SHIFT-2"],
            "MULTIACTIONBAR3BUTTON1": ["F1"],
        },
    )
    engine = MacroBindingsEngine(host=host)
    host.login()
    return host, engine


def _expected_claims(
    host: SimulatedHost, engine: MacroBindingsEngine
) -> dict[str, tuple[int, str]]:
    expected: dict[str, tuple[int, str]] = {}
    for slot, info in sorted(host.actions.items()):
        if not info.is_macro or info.identifier not in engine.context.drivers:
            continue
        state = engine.context.states.get(info.identifier)
        if state is None:
            continue
        for command in engine.synchronizer.binding_commands_for_slot(slot):
            for key in host.get_binding_keys(command):
                expected[key] = (info.identifier, state)
    return expected


def _claims(engine: MacroBindingsEngine) -> dict[str, tuple[int, str]]:
    return {
        key: (claim.macro_id, claim.action)
        for key, claim in engine.context.claims.items()
    }


def test_condition_change_rebinds_slot_keys() -> None:
    host, engine = _bootstrap({1: "/binding [harm] Focus Target; nil"})
    host.place_macro(1, 1)

    assert host.applied == {}

    host.set_flags(enable=["harm"])
    assert host.applied == {"1": "FOCUSTARGET"}
    assert engine.synchronizer.keys_for_macro(1) == {"1": "FOCUSTARGET"}

    host.set_flags(disable=["harm"])
    assert host.applied == {}
    assert engine.context.claims == {}
    assert engine.context.states[1] is None


def test_default_only_macro_binds_without_conditions() -> None:
    host, _ = _bootstrap({3: "/binding JUMP"})

    host.place_macro(2, 3)

    assert host.applied == {"2": "JUMP", "SHIFT-2": "JUMP"}


def test_macro_in_two_slots_binds_both_keys_and_survives_removal() -> None:
    host, engine = _bootstrap({1: "/binding [harm] FOCUSTARGET; JUMP"})
    host.place_macro(1, 1)
    host.place_macro(25, 1)

    assert host.applied == {"1": "JUMP", "F1": "JUMP"}

    host.set_flags(enable=["harm"])
    assert host.applied == {"1": "FOCUSTARGET", "F1": "FOCUSTARGET"}

    host.clear_slot(1)
    assert host.applied == {"F1": "FOCUSTARGET"}
    assert sorted(engine.context.slots_for_macro(1)) == [25]


def test_moving_macros_between_slots_conserves_claims() -> None:
    host, engine = _bootstrap(
        {
            1: "/binding JUMP",
            2: "/binding [harm] FOCUSTARGET; SITORSTAND",
        }
    )

    steps = [
        lambda: host.place_macro(1, 1),
        lambda: host.place_macro(2, 2),
        lambda: host.place_macro(25, 1),
        lambda: host.place_macro(1, 2),
        lambda: host.set_flags(enable=["harm"]),
        lambda: host.clear_slot(25),
        lambda: host.place_action(2, "spell", 133),
        lambda: host.set_flags(disable=["harm"]),
        lambda: host.place_macro(25, 2),
    ]
    for step in steps:
        step()
        expected = _expected_claims(host, engine)
        assert _claims(engine) == expected
        assert host.applied == {key: action for key, (_, action) in expected.items()}


def test_clearing_one_macro_never_releases_another_macros_key() -> None:
    host, engine = _bootstrap({1: "/binding JUMP", 2: "/binding SITORSTAND"})
    host.binding_keys["ACTIONBUTTON1"] = ["X"]
    host.binding_keys["MULTIACTIONBAR3BUTTON1"] = ["X"]

    host.place_macro(1, 1)
    host.place_macro(25, 2)
    assert engine.context.claims["X"].macro_id == 2

    host.clear_slot(1)

    assert host.applied == {"X": "SITORSTAND"}
    assert engine.synchronizer.keys_for_macro(1) == {}


def test_binding_commands_for_slot_follow_displayed_pages() -> None:
    _, engine = _bootstrap({})

    assert engine.synchronizer.binding_commands_for_slot(1) == ("ACTIONBUTTON1",)
    assert engine.synchronizer.binding_commands_for_slot(36) == ("MULTIACTIONBAR3BUTTON12",)
    assert engine.synchronizer.binding_commands_for_slot(13) == ()
    assert engine.synchronizer.binding_commands_for_slot(73) == ()
