"""Qualitative climate scenario labels and crop categories.

Every lookup table in :mod:`climate_garden.config.constants` is keyed by
these enums. Unknown labels raise instead of silently falling back to a
default baseline.
"""

from enum import Enum
from typing import Union


class SummerScenario(str, Enum):
    """Summer severity selected by the user."""

    MILD = "mild"
    NORMAL = "normal"
    EXTREME = "extreme"
    CATASTROPHIC = "catastrophic"


class WinterScenario(str, Enum):
    """Winter severity selected by the user."""

    TRADITIONAL = "traditional"
    MILD = "mild"
    WARM = "warm"
    NONE = "none"


class CropCategory(str, Enum):
    """Portfolio allocation categories."""

    HEAT_SPECIALISTS = "heat_specialists"
    COOL_SEASON = "cool_season"
    PERENNIALS = "perennials"
    EXPERIMENTAL = "experimental"


def parse_summer(value: Union[str, SummerScenario]) -> SummerScenario:
    """Coerce a label to :class:`SummerScenario`.

    Raises:
        ValueError: If the label is not a known summer scenario.
    """
    try:
        return SummerScenario(value)
    except ValueError:
        valid = ", ".join(s.value for s in SummerScenario)
        raise ValueError(f"Unknown summer scenario '{value}'. Valid values: {valid}") from None


def parse_winter(value: Union[str, WinterScenario]) -> WinterScenario:
    """Coerce a label to :class:`WinterScenario`.

    Raises:
        ValueError: If the label is not a known winter scenario.
    """
    try:
        return WinterScenario(value)
    except ValueError:
        valid = ", ".join(s.value for s in WinterScenario)
        raise ValueError(f"Unknown winter scenario '{value}'. Valid values: {valid}") from None
