"""Distribution parameters of a garden plan.

Converts a portfolio, budget, location and climate scenario into the Normal
distributions the Monte Carlo runner samples from:

* total harvest value: mean = sum over categories of
  ``allocation * yield multiplier * size * market price * severity``,
  std = 30% of mean;
* investment: mean = ``base_investment * portfolio_multiplier``,
  std = 10% of mean;
* per-category yield value: mean = ``allocation * yield multiplier * size *
  market price``, std = 40% (heat, cool) or 30% (perennials) of mean.

Climate severity per category: heat uses the summer factor, cool-season the
product of summer and winter factors, perennials the smaller of the two.
"""

from dataclasses import dataclass, replace
from datetime import datetime
import logging
import math
from typing import Dict, Mapping, Optional, Union
import warnings

from scipy import stats

from ._warnings import DataQualityWarning
from .config.constants import (
    CATEGORY_MARKET_PRICES,
    CATEGORY_YIELD_CV,
    CATEGORY_YIELD_MULTIPLIERS,
    DEFAULT_SAFE_MEAN,
    DEFAULT_SAFE_STD,
    HARVEST_CV,
    INVESTMENT_CV,
    SUMMER_SEVERITY,
    WINTER_SEVERITY,
)
from .config.location import LocationConfig
from .config.scenarios import (
    CropCategory,
    SummerScenario,
    WinterScenario,
    parse_summer,
    parse_winter,
)
from .config.weather import WeatherForecast
from .investment_sufficiency import InvestmentSufficiency, calculate_investment_sufficiency
from .portfolio_strategies import normalize_portfolio
from .required_investment import RequiredInvestment, calculate_required_investment
from .weather_integration import (
    WeatherAdjustments,
    calculate_weather_adjustments,
    extract_weather_metrics,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionParams:
    """Mean and standard deviation of a Normal distribution."""

    mean: float
    std: float

    def scaled(self, mean_factor: float, std_factor: float) -> "DistributionParams":
        """Return a copy with the mean and std multiplied."""
        return DistributionParams(self.mean * mean_factor, self.std * std_factor)


@dataclass(frozen=True)
class SimulationParameters:
    """Everything the runner needs, computed once per simulation.

    Attributes:
        harvest: Total harvest value distribution.
        investment: Actual spend distribution.
        heat_yield: Heat-specialist yield value distribution.
        cool_yield: Cool-season yield value distribution.
        perennial_yield: Perennial yield value distribution.
        required_investment: Recommended spend for the plan.
        investment_sufficiency: Sufficiency at the mean investment.
        weather_adjustments: Multipliers applied from a forecast, if any.
        weather_timestamp: Timestamp of that forecast, if any.
    """

    harvest: DistributionParams
    investment: DistributionParams
    heat_yield: DistributionParams
    cool_yield: DistributionParams
    perennial_yield: DistributionParams
    required_investment: RequiredInvestment
    investment_sufficiency: InvestmentSufficiency
    weather_adjustments: Optional[WeatherAdjustments] = None
    weather_timestamp: Optional[datetime] = None

    @property
    def net_return(self) -> DistributionParams:
        """Distribution of harvest minus investment (independent draws)."""
        return DistributionParams(
            self.harvest.mean - self.investment.mean,
            math.hypot(self.harvest.std, self.investment.std),
        )

    def probability_of_profit(self) -> float:
        """Analytic probability that a draw has a positive net return."""
        net = self.net_return
        if net.std <= 0:
            return 1.0 if net.mean > 0 else 0.0
        return float(stats.norm.sf(0.0, loc=net.mean, scale=net.std))


def _safe_distribution(name: str, mean: float, std: float) -> DistributionParams:
    """Replace non-finite parameters with safe defaults, loudly."""
    if not math.isfinite(mean):
        logger.warning("Non-finite %s mean %r replaced with %s", name, mean, DEFAULT_SAFE_MEAN)
        warnings.warn(
            f"Non-finite {name} mean {mean!r} replaced with {DEFAULT_SAFE_MEAN}",
            DataQualityWarning,
            stacklevel=3,
        )
        mean = DEFAULT_SAFE_MEAN
    if not math.isfinite(std) or std < 0:
        logger.warning("Invalid %s std %r replaced with %s", name, std, DEFAULT_SAFE_STD)
        warnings.warn(
            f"Invalid {name} std {std!r} replaced with {DEFAULT_SAFE_STD}",
            DataQualityWarning,
            stacklevel=3,
        )
        std = DEFAULT_SAFE_STD
    return DistributionParams(float(mean), float(std))


def climate_severity(
    summer: Union[str, SummerScenario], winter: Union[str, WinterScenario]
) -> Dict[CropCategory, float]:
    """Harvest severity factor per yielding category."""
    s = SUMMER_SEVERITY[parse_summer(summer)]
    w = WINTER_SEVERITY[parse_winter(winter)]
    return {
        CropCategory.HEAT_SPECIALISTS: s,
        CropCategory.COOL_SEASON: s * w,
        CropCategory.PERENNIALS: min(s, w),
    }


def generate_simulation_parameters(
    portfolio: Mapping[str, float],
    base_investment: float,
    portfolio_multiplier: float = 1.0,
    location: Optional[LocationConfig] = None,
    summer: Union[str, SummerScenario] = SummerScenario.NORMAL,
    winter: Union[str, WinterScenario] = WinterScenario.MILD,
    weather_data: Optional[WeatherForecast] = None,
) -> SimulationParameters:
    """Derive the sampling distributions of a garden plan.

    Args:
        portfolio: Category allocation percentages.
        base_investment: Planned spend before the risk multiplier.
        portfolio_multiplier: Risk multiplier of the portfolio strategy.
        location: Site descriptors; defaults apply when None.
        summer: Summer scenario label.
        winter: Winter scenario label.
        weather_data: Optional forecast; when it has at least one day the
            documented weather adjustment is applied.

    Returns:
        Finite distribution parameters plus the required-investment and
        sufficiency snapshots.

    Raises:
        PortfolioError: If the portfolio is missing or malformed.
        ValueError: If a scenario label is unknown.
    """
    allocations = normalize_portfolio(portfolio)
    summer = parse_summer(summer)
    winter = parse_winter(winter)
    location = location or LocationConfig()
    size = location.size_multiplier
    severity = climate_severity(summer, winter)

    expected_harvest = 0.0
    category_values: Dict[CropCategory, float] = {}
    for category, multiplier in CATEGORY_YIELD_MULTIPLIERS.items():
        base_yield = allocations.get(category.value, 0.0) * multiplier * size
        value = base_yield * CATEGORY_MARKET_PRICES[category]
        category_values[category] = value
        expected_harvest += value * severity[category]

    investment_mean = base_investment * portfolio_multiplier

    harvest = _safe_distribution("harvest", expected_harvest, expected_harvest * HARVEST_CV)
    investment = _safe_distribution("investment", investment_mean, investment_mean * INVESTMENT_CV)
    yields = {
        category: _safe_distribution(
            f"{category.value} yield", value, value * CATEGORY_YIELD_CV[category]
        )
        for category, value in category_values.items()
    }

    required = calculate_required_investment(allocations, summer, winter, size, location)
    sufficiency = calculate_investment_sufficiency(investment.mean, required)

    params = SimulationParameters(
        harvest=harvest,
        investment=investment,
        heat_yield=yields[CropCategory.HEAT_SPECIALISTS],
        cool_yield=yields[CropCategory.COOL_SEASON],
        perennial_yield=yields[CropCategory.PERENNIALS],
        required_investment=required,
        investment_sufficiency=sufficiency,
    )

    if weather_data is not None and weather_data.is_usable:
        params = apply_weather_adjustments(params, weather_data, location)
    elif weather_data is not None:
        logger.info("Forecast has no daily records, parameters left unadjusted")

    logger.debug(
        "Parameters: harvest=%.2f+/-%.2f investment=%.2f+/-%.2f P(profit)=%.3f",
        params.harvest.mean,
        params.harvest.std,
        params.investment.mean,
        params.investment.std,
        params.probability_of_profit(),
    )
    return params


def apply_weather_adjustments(
    params: SimulationParameters,
    forecast: WeatherForecast,
    location: Optional[LocationConfig] = None,
) -> SimulationParameters:
    """Scale harvest distributions by the forecast-derived multipliers.

    The harvest mean is multiplied by the yield multiplier, heat and cool
    yield means by their crop multipliers, and all three standard deviations
    by the variance multiplier. Perennial yield and investment are untouched.
    """
    adjustments = calculate_weather_adjustments(extract_weather_metrics(forecast), location)
    logger.info(
        "Applying forecast adjustment: yield x%.3f, heat x%.3f, cool x%.3f, variance x%.3f",
        adjustments.yield_multiplier,
        adjustments.heat_crop_multiplier,
        adjustments.cool_crop_multiplier,
        adjustments.variance_multiplier,
    )
    variance = adjustments.variance_multiplier
    return replace(
        params,
        harvest=params.harvest.scaled(adjustments.yield_multiplier, variance),
        heat_yield=params.heat_yield.scaled(adjustments.heat_crop_multiplier, variance),
        cool_yield=params.cool_yield.scaled(adjustments.cool_crop_multiplier, variance),
        weather_adjustments=adjustments,
        weather_timestamp=forecast.timestamp,
    )
