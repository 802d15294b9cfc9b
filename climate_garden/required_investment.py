"""Deterministic recommended spend for a garden plan.

The required investment is the budget a plan *should* have given its climate
scenario and crop mix. It involves no randomness and is only used to judge
whether the planned investment is sufficient.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Mapping, Optional, Union

from .config.constants import (
    BASE_COSTS,
    PORTFOLIO_COST_FACTORS,
    SUMMER_COST_FACTORS,
    WINTER_PROTECTION_FACTORS,
)
from .config.location import LocationConfig
from .config.scenarios import SummerScenario, WinterScenario, parse_summer, parse_winter
from .portfolio_strategies import normalize_portfolio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequiredInvestment:
    """Recommended spend per category.

    Attributes:
        breakdown: Dollar amount per spending category.
        total: Sum of the breakdown.
        climate_adjustments: Scenario labels and the factors applied, for
            traceability.
    """

    breakdown: Dict[str, float]
    total: float
    climate_adjustments: Dict[str, Any] = field(default_factory=dict)


def calculate_required_investment(
    portfolio: Mapping[str, float],
    summer: Union[str, SummerScenario],
    winter: Union[str, WinterScenario],
    size_multiplier: Optional[float] = None,
    location: Optional[LocationConfig] = None,
) -> RequiredInvestment:
    """Compute the recommended spend for a plan.

    Base costs are scaled by garden size, then by the climate factors
    (protection takes the larger of the summer and winter factors, irrigation
    the summer factor, fertilizer the summer heat factor) and finally by the
    portfolio factors, each applied in proportion to the category's
    allocation: ``1 + (factor - 1) * allocation / 100``.

    Args:
        portfolio: Category allocation percentages.
        summer: Summer scenario label.
        winter: Winter scenario label.
        size_multiplier: Garden area relative to 100 sq ft; taken from
            ``location`` when None.
        location: Site descriptors.

    Returns:
        Breakdown, total and the factors used.

    Raises:
        PortfolioError: If the portfolio is missing or malformed.
        ValueError: If a scenario label is unknown.
    """
    allocations = normalize_portfolio(portfolio)
    summer = parse_summer(summer)
    winter = parse_winter(winter)
    location = location or LocationConfig()
    if size_multiplier is None:
        size_multiplier = location.size_multiplier

    costs = {category: base * size_multiplier for category, base in BASE_COSTS.items()}

    summer_factors = SUMMER_COST_FACTORS[summer]
    winter_protection = WINTER_PROTECTION_FACTORS[winter]
    protection_factor = max(summer_factors["protection"], winter_protection)

    costs["protection"] *= protection_factor
    costs["irrigation"] *= summer_factors["irrigation"]
    costs["fertilizer"] *= summer_factors["heat"]

    for crop_category, factors in PORTFOLIO_COST_FACTORS.items():
        allocation = allocations.get(crop_category.value, 0.0)
        if allocation <= 0:
            continue
        for cost_category, factor in factors.items():
            costs[cost_category] *= 1 + (factor - 1) * allocation / 100

    total = sum(costs.values())
    logger.debug(
        "Required investment %.2f (summer=%s, winter=%s, size=%.2f)",
        total,
        summer.value,
        winter.value,
        size_multiplier,
    )

    return RequiredInvestment(
        breakdown=costs,
        total=total,
        climate_adjustments={
            "summer": summer.value,
            "winter": winter.value,
            "summer_factors": dict(summer_factors),
            "winter_protection_factor": winter_protection,
            "protection_factor": protection_factor,
            "size_multiplier": size_multiplier,
        },
    )
