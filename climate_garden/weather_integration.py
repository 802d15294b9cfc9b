"""Bridge between a real-time forecast and the simulation.

A pre-fetched :class:`~climate_garden.config.weather.WeatherForecast` is
reduced to a handful of weekly metrics, which then

* anchor the per-iteration weather samples
  (:func:`generate_weather_samples_from_forecast`),
* scale the harvest distributions through the documented multiplicative
  adjustment (:func:`calculate_weather_adjustments`), and
* drive a plain-language risk summary (:func:`generate_weather_risk_analysis`).

The adjustment is a pure function of the metrics and the location. All
multipliers start at 1.0 and are combined multiplicatively:

=====================  ===========================================
Condition              Effect
=====================  ===========================================
heat-stress days > 3   heat x0.85, cool x0.7, variance x1.2
heat-stress days = 0   cool x1.1
frost risk             cool x0.8, heat x0.3, variance x1.5
GDD ratio > 1.2        heat x1.15
GDD ratio < 0.8        heat x0.9, cool x1.05
precip ratio > 1.5     yield x0.9, variance x1.3
precip ratio < 0.5     yield x0.85, variance x1.4
=====================  ===========================================

after which ``yield *= (heat + cool) / 2`` and the results are clamped to
yield [0.2, 1.8], heat/cool [0.1, 2.0] and variance [0.5, 3.0].
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import List, Optional

import numpy as np

from .config.constants import MIN_ANNUAL_RAINFALL, REFERENCE_INTENSITY
from .config.location import LocationConfig
from .config.weather import WeatherForecast
from .weather_sampler import FORECAST, WeatherSample

logger = logging.getLogger(__name__)

HEAT_STRESS_THRESHOLD_F = 90.0
FROST_THRESHOLD_F = 35.0
DEFAULT_CURRENT_TEMP_F = 70.0
DEFAULT_GDD_YEAR_TO_DATE = 500.0
WEEKS_PER_SEASON = 26


@dataclass(frozen=True)
class WeatherMetrics:
    """Weekly summary of a forecast (first seven days)."""

    current_temp: float
    min_temp: float
    max_temp: float
    gdd_year_to_date: float
    weekly_gdd: float
    precipitation: float
    heat_stress_days: int
    frost_risk: bool


@dataclass(frozen=True)
class WeatherAdjustments:
    """Multipliers applied to harvest parameters when a forecast is present.

    Attributes:
        yield_multiplier: Scales the total harvest mean.
        heat_crop_multiplier: Scales the heat-specialist yield mean.
        cool_crop_multiplier: Scales the cool-season yield mean.
        variance_multiplier: Scales every adjusted standard deviation.
        confidence_level: Confidence in the forecast-based outlook (0.3-0.95).
        weather_score: Overall favorability from 0 (hostile) to 100.
    """

    yield_multiplier: float = 1.0
    heat_crop_multiplier: float = 1.0
    cool_crop_multiplier: float = 1.0
    variance_multiplier: float = 1.0
    confidence_level: float = 0.8
    weather_score: float = 50.0


@dataclass
class WeatherRiskAnalysis:
    """Plain-language risk summary of a forecast."""

    risk_level: str
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    weather_score: Optional[float] = None
    confidence_level: Optional[float] = None
    timestamp: Optional[datetime] = None


def extract_weather_metrics(forecast: WeatherForecast) -> WeatherMetrics:
    """Reduce the first seven forecast days to :class:`WeatherMetrics`.

    Raises:
        ValueError: If the forecast has no daily records.
    """
    week = forecast.week()
    if not week:
        raise ValueError("Forecast has no daily records")

    current = forecast.current.temperature
    return WeatherMetrics(
        current_temp=DEFAULT_CURRENT_TEMP_F if current is None else current,
        min_temp=min(day.temperature.low for day in week),
        max_temp=max(day.temperature.high for day in week),
        gdd_year_to_date=(
            DEFAULT_GDD_YEAR_TO_DATE
            if forecast.gdd_year_to_date is None
            else forecast.gdd_year_to_date
        ),
        weekly_gdd=sum(day.growing_degree_days for day in week),
        precipitation=sum(day.precipitation for day in week),
        heat_stress_days=sum(1 for day in week if day.temperature.high > HEAT_STRESS_THRESHOLD_F),
        frost_risk=any(day.temperature.low < FROST_THRESHOLD_F for day in week),
    )


def generate_weather_samples_from_forecast(
    iterations: int,
    forecast: WeatherForecast,
    location: Optional[LocationConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[WeatherSample]:
    """Draw weather samples anchored to a forecast week.

    The weekly heat-stress count is scaled to a season (x2) and jittered by
    +/-15% times the heat intensity ratio. Freeze events are anchored at 5
    when the week carries frost risk and 1 otherwise, jittered by +/-20% times
    the winter severity ratio. Rainfall blends 30% of the season-scaled
    forecast precipitation with 70% of the location average, jittered by
    +/-10% and floored at 10 inches. Counts are rounded to integers.

    Args:
        iterations: Number of samples to draw.
        forecast: Forecast with at least one day of data.
        location: Site descriptors; defaults apply when None.
        rng: Random generator; a fresh unseeded generator when None.

    Returns:
        Exactly ``iterations`` samples with ``data_source="forecast"``.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    location = location or LocationConfig()
    rng = rng if rng is not None else np.random.default_rng()
    metrics = extract_weather_metrics(forecast)

    heat_ratio = location.heat_intensity / REFERENCE_INTENSITY
    winter_ratio = location.winter_severity / REFERENCE_INTENSITY

    base_stress = metrics.heat_stress_days * 2
    stress = base_stress + (rng.uniform(size=iterations) - 0.5) * base_stress * 0.3 * heat_ratio

    base_freeze = 5 if metrics.frost_risk else 1
    freeze = base_freeze + (rng.uniform(size=iterations) - 0.5) * base_freeze * 0.4 * winter_ratio

    blended = metrics.precipitation * WEEKS_PER_SEASON * 0.3 + location.avg_rainfall * 0.7
    rainfall = blended + (rng.uniform(size=iterations) - 0.5) * blended * 0.2

    gdd = metrics.gdd_year_to_date * (1 + (rng.uniform(size=iterations) - 0.5) * 0.1)

    stress = np.maximum(0, np.rint(stress))
    freeze = np.maximum(0, np.rint(freeze))
    rainfall = np.maximum(MIN_ANNUAL_RAINFALL, rainfall)

    return [
        WeatherSample(
            stress_days=int(s),
            freeze_events=int(f),
            annual_rainfall=float(r),
            data_source=FORECAST,
            growing_degree_days=float(g),
        )
        for s, f, r, g in zip(stress, freeze, rainfall, gdd)
    ]


def calculate_confidence_level(metrics: WeatherMetrics) -> float:
    """Confidence in a forecast-based outlook, clamped to [0.3, 0.95]."""
    confidence = 0.8
    if metrics.heat_stress_days > 4:
        confidence *= 0.8
    if metrics.frost_risk:
        confidence *= 0.7
    if metrics.precipitation < 0.1 or metrics.precipitation > 3:
        confidence *= 0.9
    return float(np.clip(confidence, 0.3, 0.95))


def calculate_weather_score(metrics: WeatherMetrics) -> float:
    """Favorability score from 0 to 100 with 50 as neutral."""
    score = 50.0

    if 60 <= metrics.current_temp <= 80:
        score += 15
    elif metrics.current_temp < 40 or metrics.current_temp > 95:
        score -= 15

    score -= metrics.heat_stress_days * 5

    if metrics.frost_risk:
        score -= 20

    if 0.5 <= metrics.precipitation <= 2:
        score += 10
    elif metrics.precipitation < 0.1 or metrics.precipitation > 4:
        score -= 15

    if 50 <= metrics.weekly_gdd <= 200:
        score += 10

    return float(np.clip(score, 0, 100))


def calculate_weather_adjustments(
    metrics: WeatherMetrics, location: Optional[LocationConfig] = None
) -> WeatherAdjustments:
    """Derive harvest multipliers from forecast metrics.

    See the module docstring for the full rule table.

    Args:
        metrics: Weekly forecast metrics.
        location: Site whose ``heat_days`` and ``avg_rainfall`` set the
            expected GDD and weekly precipitation.

    Returns:
        Clamped multipliers plus confidence and weather score.
    """
    location = location or LocationConfig()
    yield_mult = 1.0
    heat = 1.0
    cool = 1.0
    variance = 1.0

    if metrics.heat_stress_days > 3:
        heat *= 0.85
        cool *= 0.7
        variance *= 1.2
    elif metrics.heat_stress_days == 0:
        cool *= 1.1

    if metrics.frost_risk:
        cool *= 0.8
        heat *= 0.3
        variance *= 1.5

    expected_gdd = location.heat_days * 3
    gdd_ratio = metrics.gdd_year_to_date / expected_gdd if expected_gdd > 0 else 1.0
    if gdd_ratio > 1.2:
        heat *= 1.15
    elif gdd_ratio < 0.8:
        heat *= 0.9
        cool *= 1.05

    weekly_rain = location.avg_rainfall / WEEKS_PER_SEASON
    precip_ratio = metrics.precipitation / weekly_rain
    if precip_ratio > 1.5:
        yield_mult *= 0.9
        variance *= 1.3
    elif precip_ratio < 0.5:
        yield_mult *= 0.85
        variance *= 1.4

    yield_mult *= (heat + cool) / 2

    return WeatherAdjustments(
        yield_multiplier=float(np.clip(yield_mult, 0.2, 1.8)),
        heat_crop_multiplier=float(np.clip(heat, 0.1, 2.0)),
        cool_crop_multiplier=float(np.clip(cool, 0.1, 2.0)),
        variance_multiplier=float(np.clip(variance, 0.5, 3.0)),
        confidence_level=calculate_confidence_level(metrics),
        weather_score=calculate_weather_score(metrics),
    )


def generate_weather_risk_analysis(
    forecast: Optional[WeatherForecast],
    now: Optional[datetime] = None,
) -> WeatherRiskAnalysis:
    """Summarize the risks a forecast week poses to the garden.

    Args:
        forecast: Forecast to analyze; ``None`` or an empty forecast yields
            an ``"unknown"`` risk level.
        now: Timestamp to stamp on the analysis; UTC now when None.

    Returns:
        Risk level (``low``, ``medium``, ``high`` or ``unknown``), the
        contributing factors and matching recommendations.
    """
    if forecast is None or not forecast.is_usable:
        return WeatherRiskAnalysis(
            risk_level="unknown",
            recommendations=["Configure weather data integration for detailed risk analysis"],
        )

    metrics = extract_weather_metrics(forecast)
    factors: List[str] = []
    recommendations: List[str] = []
    risk_level = "low"

    if metrics.current_temp < FROST_THRESHOLD_F:
        factors.append("Frost damage risk")
        recommendations.append("Protect sensitive plants overnight")
        risk_level = "high"
    elif metrics.current_temp > 95:
        factors.append("Heat stress risk")
        recommendations.append("Increase watering frequency")
        risk_level = "medium"

    if metrics.heat_stress_days > 3:
        factors.append("Extended heat wave conditions")
        recommendations.append("Consider shade cloth for vulnerable crops")
        risk_level = "high"

    if metrics.frost_risk:
        factors.append("Frost risk in coming week")
        recommendations.append("Delay planting of heat-sensitive crops")
        risk_level = "high"

    if metrics.precipitation < 0.1:
        factors.append("Drought conditions")
        recommendations.append("Implement water conservation measures")
        if risk_level == "low":
            risk_level = "medium"
    elif metrics.precipitation > 3:
        factors.append("Excessive moisture conditions")
        recommendations.append("Monitor for fungal diseases")
        if risk_level == "low":
            risk_level = "medium"

    return WeatherRiskAnalysis(
        risk_level=risk_level,
        factors=factors,
        recommendations=recommendations,
        weather_score=calculate_weather_score(metrics),
        confidence_level=calculate_confidence_level(metrics),
        timestamp=now or datetime.now(timezone.utc),
    )
