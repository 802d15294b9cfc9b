"""Synthetic weather sampling for Monte Carlo iterations.

Each iteration gets one simulated growing year: a count of heat-stress days,
a count of freeze events and an annual rainfall total. Counts are Poisson
with scenario-specific baseline rates scaled by the location's heat and
winter indices; rainfall is Normal around the location average.

Forecast-anchored samples are produced by
:func:`climate_garden.weather_integration.generate_weather_samples_from_forecast`
and share the :class:`WeatherSample` record defined here.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Tuple, Union

import numpy as np

from .config.constants import (
    BASE_FREEZE_EVENTS,
    BASE_STRESS_DAYS,
    MIN_ANNUAL_RAINFALL,
    RAINFALL_CV,
    REFERENCE_INTENSITY,
)
from .config.location import LocationConfig
from .config.scenarios import SummerScenario, WinterScenario, parse_summer, parse_winter

logger = logging.getLogger(__name__)

SYNTHETIC = "synthetic"
FORECAST = "forecast"


@dataclass(frozen=True)
class WeatherSample:
    """One simulated growing year.

    Attributes:
        stress_days: Days of heat stress (non-negative).
        freeze_events: Freeze events over the winter (non-negative).
        annual_rainfall: Annual rainfall in inches (at least 10).
        data_source: ``"synthetic"`` or ``"forecast"``.
        growing_degree_days: Season GDD, only known for forecast samples.
    """

    stress_days: int
    freeze_events: int
    annual_rainfall: float
    data_source: str = SYNTHETIC
    growing_degree_days: Optional[float] = None


def get_stress_days_params(
    summer: Union[str, SummerScenario], location: Optional[LocationConfig] = None
) -> float:
    """Poisson rate of heat-stress days for a summer scenario.

    Args:
        summer: Summer scenario label.
        location: Site whose ``heat_intensity`` scales the baseline.

    Returns:
        Expected stress days per year.
    """
    location = location or LocationConfig()
    return BASE_STRESS_DAYS[parse_summer(summer)] * location.heat_intensity / REFERENCE_INTENSITY


def get_freeze_params(
    winter: Union[str, WinterScenario], location: Optional[LocationConfig] = None
) -> float:
    """Poisson rate of freeze events for a winter scenario."""
    location = location or LocationConfig()
    return (
        BASE_FREEZE_EVENTS[parse_winter(winter)] * location.winter_severity / REFERENCE_INTENSITY
    )


def get_rainfall_params(location: Optional[LocationConfig] = None) -> Tuple[float, float]:
    """Mean and standard deviation of annual rainfall."""
    location = location or LocationConfig()
    mean = location.avg_rainfall
    return mean, RAINFALL_CV * mean


def generate_weather_samples(
    iterations: int,
    location: Optional[LocationConfig] = None,
    summer: Union[str, SummerScenario] = SummerScenario.NORMAL,
    winter: Union[str, WinterScenario] = WinterScenario.MILD,
    rng: Optional[np.random.Generator] = None,
) -> List[WeatherSample]:
    """Draw independent synthetic weather samples.

    Args:
        iterations: Number of samples to draw.
        location: Site descriptors; defaults apply when None.
        summer: Summer scenario label.
        winter: Winter scenario label.
        rng: Random generator; a fresh unseeded generator when None.

    Returns:
        Exactly ``iterations`` samples.

    Raises:
        ValueError: If ``iterations`` is negative or a scenario label is unknown.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    location = location or LocationConfig()
    rng = rng if rng is not None else np.random.default_rng()

    stress_rate = get_stress_days_params(summer, location)
    freeze_rate = get_freeze_params(winter, location)
    rain_mean, rain_std = get_rainfall_params(location)

    stress = rng.poisson(stress_rate, size=iterations)
    freeze = rng.poisson(freeze_rate, size=iterations)
    rainfall = np.maximum(MIN_ANNUAL_RAINFALL, rng.normal(rain_mean, rain_std, size=iterations))

    return [
        WeatherSample(
            stress_days=int(s),
            freeze_events=int(f),
            annual_rainfall=float(r),
            data_source=SYNTHETIC,
        )
        for s, f, r in zip(stress, freeze, rainfall)
    ]
