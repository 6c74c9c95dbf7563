"""Regression tests for the TOML bar configuration loader."""
from __future__ import annotations

from pathlib import Path

import pytest

from macrobindings.bar_config import (
    BarConfigError,
    describe_bar_config,
    load_bar_config,
    merge_bar_config,
    validate_template,
)
from macrobindings.bar_defaults import (
    DEFAULT_BAR_TEMPLATES,
    NATIVE_PAGE_RESPONSE,
    BarDefaults,
    PageDriverConfig,
)


def test_load_bar_config_applies_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "bars.toml"
    config_path.write_text(
        "[engine]\n"
        "buttons_per_bar = 10\n"
        "max_character_macros = 30\n"
        'slash_command = "/bind"\n\n'
        "[bars]\n"
        "3 = false\n"
        '20 = "MYBAR%d"\n\n'
        '[pages.20]\n'
        'condition = "[mod:shift] 21; 20"\n',
        encoding="utf-8",
    )

    defaults = load_bar_config(config_path)

    assert defaults.buttons_per_bar == 10
    assert defaults.max_macros == 150
    assert defaults.slash_command == "/bind"
    assert 3 not in defaults.bar_templates
    assert defaults.bar_templates[20] == "MYBAR%d"
    assert defaults.bar_templates[1] == DEFAULT_BAR_TEMPLATES[1]
    assert [driver.bar_id for driver in defaults.page_drivers] == [1, 20]
    assert defaults.page_drivers[1] == PageDriverConfig(
        bar_id=20, condition="[mod:shift] 21; 20"
    )


def test_merge_bar_config_replaces_and_removes_page_drivers() -> None:
    defaults = merge_bar_config(
        {"pages": {"1": {"response": "package.module:page_for"}}}
    )
    assert defaults.page_drivers == (
        PageDriverConfig(bar_id=1, condition=None, response="package.module:page_for"),
    )

    defaults = merge_bar_config({"pages": {"1": False}})
    assert defaults.page_drivers == ()


def test_merge_bar_config_without_sections_keeps_the_stub() -> None:
    assert merge_bar_config({}) == BarDefaults.stub()


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"engine": {"buttons_per_bar": 0}}, "must be positive"),
        ({"engine": {"max_account_macros": "120"}}, "must be an integer"),
        ({"engine": {"max_account_macros": True}}, "must be an integer"),
        ({"engine": {"slash_command": "binding"}}, "starting with '/'"),
        ({"engine": {"bonus": 1}}, "unknown [engine] keys: bonus"),
        ({"engine": 3}, "[engine] section"),
        ({"bars": {"abc": "X%d"}}, "invalid bar id"),
        ({"bars": {"0": "X%d"}}, "must be positive"),
        ({"bars": {"3": "X%d%d"}}, "exactly one %d"),
        ({"bars": {"3": "X"}}, "exactly one %d"),
        ({"bars": {"3": 7}}, "must be a string"),
        ({"pages": {"3": {}}}, "a condition, a response or both"),
        ({"pages": {"3": "7"}}, "must be a table"),
        ({"pages": {"3": {"condition": 3}}}, "condition must be a string"),
        ({"pages": {"3": {"response": " "}}}, "must not be empty"),
    ],
)
def test_merge_bar_config_rejects_invalid_data(data: dict, message: str) -> None:
    with pytest.raises(BarConfigError) as excinfo:
        merge_bar_config(data)

    assert message in str(excinfo.value)


def test_validate_template_strips_whitespace() -> None:
    assert validate_template("  MYBAR%d ", bar_id=4) == "MYBAR%d"
    with pytest.raises(BarConfigError):
        validate_template("MY%sBAR%d", bar_id=4)


def test_describe_bar_config_lists_groups_in_order() -> None:
    rows = describe_bar_config(BarDefaults.stub())

    assert [row["bar"] for row in rows] == sorted(DEFAULT_BAR_TEMPLATES)
    assert rows[0]["template"] == "ACTIONBUTTON%d"
    assert rows[0]["response"] == NATIVE_PAGE_RESPONSE
    assert rows[0]["condition"].endswith("; 15")
    assert rows[1] == {
        "bar": 3,
        "template": "MULTIACTIONBAR3BUTTON%d",
        "condition": None,
        "response": None,
    }
