"""Default bar layout and engine constants mirroring the host's stock UI."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .parser import DEFAULT_SLASH_COMMAND


NUM_ACTIONBAR_BUTTONS = 12
MAX_ACCOUNT_MACROS = 120
MAX_CHARACTER_MACROS = 18

NATIVE_PAGE_RESPONSE = "macrobindings.engine.pages:native_page_response"

# Pages 2 and 7-10 are alternate pages of group 1, so they are not groups.
DEFAULT_BAR_TEMPLATES: Mapping[int, str] = MappingProxyType(
    {
        1: "ACTIONBUTTON%d",
        3: "MULTIACTIONBAR3BUTTON%d",
        4: "MULTIACTIONBAR4BUTTON%d",
        5: "MULTIACTIONBAR2BUTTON%d",
        6: "MULTIACTIONBAR1BUTTON%d",
        13: "MULTIACTIONBAR5BUTTON%d",
        14: "MULTIACTIONBAR6BUTTON%d",
        15: "MULTIACTIONBAR7BUTTON%d",
    }
)

MAIN_BAR_PAGE_CONDITIONS: Tuple[str, ...] = (
    "vehicleui",
    "possessbar",
    "overridebar",
    "shapeshift",
    "bar:2",
    "bar:3",
    "bar:4",
    "bar:5",
    "bar:6",
    "bonusbar:1",
    "bonusbar:2",
    "bonusbar:3",
    "bonusbar:4",
    "bonusbar:5",
)


def build_page_condition(conditions: Tuple[str, ...]) -> str:
    """Number ``conditions`` in priority order and append the fallback page."""

    parts = [f"[{condition}] {index}" for index, condition in enumerate(conditions, start=1)]
    parts.append(str(len(conditions) + 1))
    return "; ".join(parts)


@dataclass(frozen=True)
class PageDriverConfig:
    """Page driver installed for a bar group at start-up."""

    bar_id: int
    condition: Optional[str]
    response: Optional[str] = None


@dataclass(frozen=True)
class BarDefaults:
    """Engine constants, bar templates and start-up page drivers."""

    buttons_per_bar: int = NUM_ACTIONBAR_BUTTONS
    max_account_macros: int = MAX_ACCOUNT_MACROS
    max_character_macros: int = MAX_CHARACTER_MACROS
    slash_command: str = DEFAULT_SLASH_COMMAND
    bar_templates: Mapping[int, str] = field(
        default_factory=lambda: DEFAULT_BAR_TEMPLATES
    )
    page_drivers: Tuple[PageDriverConfig, ...] = ()

    @property
    def max_macros(self) -> int:
        return self.max_account_macros + self.max_character_macros

    @classmethod
    def stub(cls) -> "BarDefaults":
        """Return the stock layout with the native main-bar page driver."""

        return cls(
            bar_templates=DEFAULT_BAR_TEMPLATES,
            page_drivers=(
                PageDriverConfig(
                    bar_id=1,
                    condition=build_page_condition(MAIN_BAR_PAGE_CONDITIONS),
                    response=NATIVE_PAGE_RESPONSE,
                ),
            ),
        )


__all__ = [
    "BarDefaults",
    "DEFAULT_BAR_TEMPLATES",
    "MAIN_BAR_PAGE_CONDITIONS",
    "MAX_ACCOUNT_MACROS",
    "MAX_CHARACTER_MACROS",
    "NATIVE_PAGE_RESPONSE",
    "NUM_ACTIONBAR_BUTTONS",
    "PageDriverConfig",
    "build_page_condition",
]
