"""Load bar templates and page drivers from TOML files."""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import tomllib

from .bar_defaults import BarDefaults, PageDriverConfig


_ENGINE_INT_KEYS = ("buttons_per_bar", "max_account_macros", "max_character_macros")


class BarConfigError(ValueError):
    """Raised when a bar configuration file fails validation."""


def load_bar_config(config_path: Path) -> BarDefaults:
    """Merge ``[engine]``, ``[bars]`` and ``[pages]`` overrides over the stub."""

    with config_path.open("rb") as stream:
        data = tomllib.load(stream)
    return merge_bar_config(data)


def merge_bar_config(
    data: Mapping[str, Any], defaults: BarDefaults | None = None
) -> BarDefaults:
    base = defaults or BarDefaults.stub()
    engine_overrides = _parse_engine_section(data)

    templates = dict(base.bar_templates)
    for bar_id, template in _parse_bar_templates(data).items():
        if template is None:
            templates.pop(bar_id, None)
        else:
            templates[bar_id] = template

    page_drivers = {driver.bar_id: driver for driver in base.page_drivers}
    for bar_id, driver in _parse_page_drivers(data).items():
        if driver is None:
            page_drivers.pop(bar_id, None)
        else:
            page_drivers[bar_id] = driver

    return replace(
        base,
        bar_templates=templates,
        page_drivers=tuple(page_drivers[bar_id] for bar_id in sorted(page_drivers)),
        **engine_overrides,
    )


def _parse_engine_section(data: Mapping[str, Any]) -> Dict[str, object]:
    raw_engine = data.get("engine")
    if raw_engine is None:
        return {}
    if not isinstance(raw_engine, Mapping):
        raise BarConfigError("[engine] section must be a mapping")

    overrides: Dict[str, object] = {}
    for key in _ENGINE_INT_KEYS:
        if key not in raw_engine:
            continue
        value = raw_engine[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise BarConfigError(f"engine.{key} must be an integer")
        if value < 0 or (key == "buttons_per_bar" and value == 0):
            raise BarConfigError(f"engine.{key} must be positive")
        overrides[key] = value

    if "slash_command" in raw_engine:
        command = raw_engine["slash_command"]
        if not isinstance(command, str) or not command.strip().startswith("/"):
            raise BarConfigError("engine.slash_command must be a string starting with '/'")
        overrides["slash_command"] = command.strip()

    unknown = set(raw_engine) - set(_ENGINE_INT_KEYS) - {"slash_command"}
    if unknown:
        raise BarConfigError(f"unknown [engine] keys: {', '.join(sorted(unknown))}")
    return overrides


def _parse_bar_templates(data: Mapping[str, Any]) -> Dict[int, str | None]:
    raw_bars = data.get("bars")
    if raw_bars is None:
        return {}
    if not isinstance(raw_bars, Mapping):
        raise BarConfigError("[bars] section must map bar ids to templates")

    templates: Dict[int, str | None] = {}
    for raw_bar, raw_template in raw_bars.items():
        bar_id = _coerce_bar_id(raw_bar)
        if raw_template is False:
            templates[bar_id] = None
            continue
        templates[bar_id] = validate_template(raw_template, bar_id=bar_id)
    return templates


def _parse_page_drivers(data: Mapping[str, Any]) -> Dict[int, PageDriverConfig | None]:
    raw_pages = data.get("pages")
    if raw_pages is None:
        return {}
    if not isinstance(raw_pages, Mapping):
        raise BarConfigError("[pages] section must be a table of bar ids")

    drivers: Dict[int, PageDriverConfig | None] = {}
    for raw_bar, raw_entry in raw_pages.items():
        bar_id = _coerce_bar_id(raw_bar)
        if raw_entry is False:
            drivers[bar_id] = None
            continue
        if not isinstance(raw_entry, Mapping):
            raise BarConfigError(f"pages.{bar_id} must be a table")
        condition = raw_entry.get("condition")
        response = raw_entry.get("response")
        if condition is not None and not isinstance(condition, str):
            raise BarConfigError(f"pages.{bar_id}.condition must be a string")
        if response is not None:
            response = _coerce_import_path(response, bar_id=bar_id)
        if condition is None and response is None:
            raise BarConfigError(
                f"pages.{bar_id} must define a condition, a response or both"
            )
        drivers[bar_id] = PageDriverConfig(
            bar_id=bar_id, condition=condition, response=response
        )
    return drivers


def validate_template(raw_template: Any, *, bar_id: int) -> str:
    """Ensure ``raw_template`` formats exactly one button number."""

    if not isinstance(raw_template, str):
        raise BarConfigError(f"bar {bar_id} template must be a string")
    template = raw_template.strip()
    if template.count("%d") != 1 or template.replace("%d", "").count("%") != 0:
        raise BarConfigError(
            f"bar {bar_id} template '{raw_template}' must contain exactly one %d"
        )
    return template


def _coerce_bar_id(raw_bar: Any) -> int:
    if isinstance(raw_bar, int):
        bar_id = raw_bar
    elif isinstance(raw_bar, str):
        try:
            bar_id = int(raw_bar.strip())
        except ValueError as exc:
            raise BarConfigError(f"invalid bar id '{raw_bar}'") from exc
    else:  # pragma: no cover - TOML keys are always strings
        raise BarConfigError("bar ids must be integers")
    if bar_id < 1:
        raise BarConfigError("bar ids must be positive")
    return bar_id


def _coerce_import_path(raw_path: Any, *, bar_id: int) -> str:
    if not isinstance(raw_path, str):
        raise BarConfigError(f"pages.{bar_id}.response must be a string")
    target = raw_path.strip()
    if not target:
        raise BarConfigError(f"pages.{bar_id}.response must not be empty")
    return target


def describe_bar_config(defaults: BarDefaults) -> Tuple[Dict[str, object], ...]:
    """Summarise configured groups for CLI output."""

    drivers = {driver.bar_id: driver for driver in defaults.page_drivers}
    rows = []
    for bar_id in sorted(set(defaults.bar_templates) | set(drivers)):
        driver = drivers.get(bar_id)
        rows.append(
            {
                "bar": bar_id,
                "template": defaults.bar_templates.get(bar_id),
                "condition": driver.condition if driver else None,
                "response": driver.response if driver else None,
            }
        )
    return tuple(rows)


__all__ = [
    "BarConfigError",
    "describe_bar_config",
    "load_bar_config",
    "merge_bar_config",
    "validate_template",
]
