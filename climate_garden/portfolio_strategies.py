"""Portfolio strategies and allocation validation.

A portfolio maps crop category keys to allocation percentages. This module
holds the preset strategies (conservative, aggressive, hedge), adapts them
to the climate of a location, validates caller-supplied allocations and
scores their climate risk.
"""

from dataclasses import dataclass, field
import logging
import math
from numbers import Real
from typing import Any, Dict, Mapping, Optional

from .config.exceptions import PortfolioError
from .config.location import LocationConfig, parse_zone_number
from .config.scenarios import CropCategory

logger = logging.getLogger(__name__)

KNOWN_CATEGORIES = frozenset(c.value for c in CropCategory)

PORTFOLIO_MULTIPLIERS: Dict[str, float] = {
    "conservative": 0.85,
    "aggressive": 1.15,
    "hedge": 1.0,
}


@dataclass(frozen=True)
class PortfolioStrategy:
    """A named allocation preset."""

    name: str
    description: str
    allocation: Dict[str, float] = field(default_factory=dict)


def _alloc(heat: float, cool: float, perennial: float, experimental: float) -> Dict[str, float]:
    return {
        CropCategory.HEAT_SPECIALISTS.value: heat,
        CropCategory.COOL_SEASON.value: cool,
        CropCategory.PERENNIALS.value: perennial,
        CropCategory.EXPERIMENTAL.value: experimental,
    }


DEFAULT_STRATEGIES: Dict[str, PortfolioStrategy] = {
    "conservative": PortfolioStrategy(
        "Conservative Portfolio", "60% success rate", _alloc(40, 35, 15, 10)
    ),
    "aggressive": PortfolioStrategy(
        "Aggressive Portfolio", "80% upside, 40% downside", _alloc(25, 50, 15, 10)
    ),
    "hedge": PortfolioStrategy("Hedge Portfolio", "70% success rate", _alloc(30, 40, 20, 10)),
}

CLIMATE_ALLOCATIONS: Dict[str, Dict[str, Dict[str, float]]] = {
    "conservative": {
        "hot": _alloc(60, 20, 15, 5),
        "cold": _alloc(20, 35, 15, 5),
        "normal": _alloc(40, 35, 15, 10),
    },
    "aggressive": {
        "hot": _alloc(50, 30, 10, 10),
        "cold": _alloc(15, 50, 10, 15),
        "normal": _alloc(25, 50, 15, 10),
    },
    "hedge": {
        "hot": _alloc(45, 30, 20, 5),
        "cold": _alloc(25, 40, 20, 5),
        "normal": _alloc(30, 40, 20, 10),
    },
}

# Cool-season share in short-season (zone < 5) cold climates
SHORT_SEASON_COOL_SHARE: Dict[str, float] = {"aggressive": 70, "hedge": 50, "conservative": 60}

PORTFOLIO_NAMES: Dict[str, Dict[str, str]] = {
    "conservative": {
        "hot": "Heat-Adapted Conservative",
        "cold": "Cold-Hardy Conservative",
        "normal": "Conservative Portfolio",
    },
    "aggressive": {
        "hot": "Desert Specialist",
        "cold": "Season Extension",
        "normal": "Aggressive Portfolio",
    },
    "hedge": {"hot": "Heat-Balanced", "cold": "Climate-Hedged", "normal": "Hedge Portfolio"},
}

PORTFOLIO_DESCRIPTORS: Dict[str, Dict[str, str]] = {
    "conservative": {"default": "60% success rate - adapted to local conditions"},
    "aggressive": {
        "hot": "High heat tolerance focus",
        "cold": "Maximum season length",
        "default": "80% upside, 40% downside",
    },
    "hedge": {"default": "70% success rate - climate-balanced approach"},
}


def normalize_portfolio(portfolio: Any) -> Dict[str, float]:
    """Validate a caller-supplied portfolio and return a plain copy.

    Percentages need not sum to 100. Unknown category keys are kept (they
    contribute nothing) and logged.

    Args:
        portfolio: Mapping of category key to allocation percentage.

    Returns:
        New dict with string keys and float allocations.

    Raises:
        PortfolioError: If the portfolio is missing, not a mapping, or holds
            an allocation that is not a finite number in [0, 100].
    """
    if portfolio is None:
        raise PortfolioError("A portfolio allocation is required to run a simulation")
    if not isinstance(portfolio, Mapping):
        raise PortfolioError(
            f"Portfolio must be a mapping of category to percentage, "
            f"got {type(portfolio).__name__}"
        )

    normalized: Dict[str, float] = {}
    for key, value in portfolio.items():
        name = key.value if isinstance(key, CropCategory) else str(key)
        if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
            raise PortfolioError(f"Allocation for '{name}' must be a finite number, got {value!r}")
        if value < 0 or value > 100:
            raise PortfolioError(f"Allocation for '{name}' must be between 0 and 100, got {value}")
        if name not in KNOWN_CATEGORIES:
            logger.warning("Unknown portfolio category '%s' contributes nothing", name)
        normalized[name] = float(value)
    return normalized


def get_climate_type(heat_days: float, hardiness_zone: str) -> str:
    """Classify a site as ``hot``, ``cold`` or ``normal``.

    Hot when more than 120 heat days per year; otherwise cold when the
    hardiness zone is below 6.
    """
    if heat_days > 120:
        return "hot"
    zone = parse_zone_number(hardiness_zone)
    return "cold" if zone < 6 else "normal"


def get_portfolio_strategies(
    location: Optional[LocationConfig] = None,
    custom: Optional[PortfolioStrategy] = None,
) -> Dict[str, PortfolioStrategy]:
    """Preset strategies, adapted to a location's climate when given.

    Args:
        location: Site to adapt to; the location-independent defaults are
            returned when None.
        custom: Optional user-defined strategy added under ``"custom"``.

    Returns:
        Mapping of strategy key to strategy.
    """
    if location is None:
        strategies = dict(DEFAULT_STRATEGIES)
    else:
        climate = get_climate_type(location.heat_days, location.hardiness_zone)
        short_season = location.zone_number < 5
        strategies = {}
        for strategy, allocations in CLIMATE_ALLOCATIONS.items():
            allocation = dict(allocations[climate])
            if climate == "cold" and short_season:
                allocation[CropCategory.COOL_SEASON.value] = SHORT_SEASON_COOL_SHARE[strategy]
            descriptors = PORTFOLIO_DESCRIPTORS[strategy]
            strategies[strategy] = PortfolioStrategy(
                name=PORTFOLIO_NAMES[strategy][climate],
                description=descriptors.get(climate, descriptors["default"]),
                allocation=allocation,
            )

    if custom is not None:
        strategies["custom"] = custom
    return strategies


def get_default_allocation(strategy: str) -> Dict[str, float]:
    """Location-independent allocation of a preset (conservative if unknown)."""
    preset = DEFAULT_STRATEGIES.get(strategy)
    if preset is None:
        logger.warning("Unknown strategy '%s', using conservative allocation", strategy)
        preset = DEFAULT_STRATEGIES["conservative"]
    return dict(preset.allocation)


def validate_portfolio_allocations(allocation: Mapping[str, float]) -> bool:
    """Whether the four category allocations add up to 100 (within 1)."""
    total = sum(allocation.get(c.value, 0) for c in CropCategory)
    return abs(total - 100) < 1


def calculate_portfolio_risk(allocation: Mapping[str, float], climate_type: str) -> int:
    """Climate risk score of an allocation, 0 (safe) to 100.

    Each category's percentage is weighted by how poorly it suits the
    climate; unknown categories weigh 0.5.
    """
    weights = {
        CropCategory.HEAT_SPECIALISTS.value: {"hot": 0.1, "cold": 0.8}.get(climate_type, 0.4),
        CropCategory.COOL_SEASON.value: {"cold": 0.1, "hot": 0.9}.get(climate_type, 0.3),
        CropCategory.PERENNIALS.value: 0.2,
        CropCategory.EXPERIMENTAL.value: 0.7,
    }
    risk = sum(pct * weights.get(category, 0.5) / 100 for category, pct in allocation.items())
    return int(math.floor(risk * 100 + 0.5))


def get_portfolio_multiplier(strategy: str) -> float:
    """Investment risk multiplier of a strategy (hedge, 1.0, if unknown)."""
    if strategy not in PORTFOLIO_MULTIPLIERS:
        logger.warning("Unknown strategy '%s', using hedge multiplier", strategy)
    return PORTFOLIO_MULTIPLIERS.get(strategy, PORTFOLIO_MULTIPLIERS["hedge"])
