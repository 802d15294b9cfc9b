"""Per-iteration planting and harvest calendar.

Every Monte Carlo iteration turns its weather sample into one calendar:
planting windows and harvest windows for every crop of every allocated
category, plus critical garden tasks triggered by the sample's heat stress
and freeze counts.

All date arithmetic is anchored on the location's average last frost date,
which is first shifted by the iteration's freeze count:

====================  ==========
freeze events         frost shift
====================  ==========
> 15                  +14 days
> 8                   +7 days
< 3                   -7 days
otherwise             0
====================  ==========
"""

from dataclasses import dataclass
from datetime import date, timedelta
import logging
import math
import re
from typing import List, Mapping, Optional, Tuple

from .config.constants import HARVEST_OFFSETS, PLANTING_WINDOW
from .config.location import LocationConfig
from .crop_catalog import CropCatalog, CropReference, resolve_catalog
from .weather_sampler import WeatherSample

logger = logging.getLogger(__name__)

_RELATIVE_HINT = re.compile(
    r"(\d+)\s*(week|day)s?\s+(before|after)\s+(?:the\s+)?last\s+frost", re.IGNORECASE
)

# Checked in order; the first keyword contained in the hint wins.
_SEASON_OFFSETS: Tuple[Tuple[str, int], ...] = (
    ("early spring", -28),
    ("late spring", 21),
    ("early summer", 45),
    ("late summer", 105),
    ("spring", 0),
    ("summer", 45),
    ("fall", 140),
    ("autumn", 140),
)

PLANTING_BASE_CONFIDENCE = 0.85
PLANTING_CONFIDENCE_BOUNDS = (0.3, 0.95)
HARVEST_BASE_CONFIDENCE = 0.75
HARVEST_CONFIDENCE_BOUNDS = (0.4, 0.9)
NORMAL_RAINFALL_BAND = (0.7, 1.3)


@dataclass(frozen=True)
class PlantingEvent:
    """Planting window for one crop."""

    crop: str
    crop_key: str
    crop_type: str
    optimal_date: date
    early_date: Optional[date]
    late_date: Optional[date]
    confidence: float


@dataclass(frozen=True)
class HarvestEvent:
    """Harvest window for one crop."""

    crop: str
    crop_key: str
    crop_type: str
    first_harvest: date
    peak_harvest: Optional[date]
    last_harvest: Optional[date]
    confidence: float


@dataclass(frozen=True)
class CriticalEvent:
    """Weather-triggered garden task."""

    type: str
    date: date
    description: str
    priority: str
    confidence: float


@dataclass(frozen=True)
class WeatherEvent:
    """Categorical summary of an iteration's weather."""

    type: str
    severity: str


@dataclass(frozen=True)
class ScenarioCalendar:
    """Calendar derived from one weather sample."""

    planting_events: Tuple[PlantingEvent, ...]
    harvest_events: Tuple[HarvestEvent, ...]
    critical_events: Tuple[CriticalEvent, ...]
    weather_events: Tuple[WeatherEvent, ...]
    adjusted_last_frost: date


def frost_shift_days(freeze_events: int) -> int:
    """Days the last frost moves for a given freeze count."""
    if freeze_events > 15:
        return 14
    if freeze_events > 8:
        return 7
    if freeze_events < 3:
        return -7
    return 0


def planting_offset_days(hint: str) -> int:
    """Offset from the last frost encoded in a planting-season hint.

    ``"N weeks before/after last frost"`` (or days) is parsed exactly;
    seasonal keywords map to fixed offsets. Unrecognised hints plant on the
    frost date.
    """
    match = _RELATIVE_HINT.search(hint)
    if match:
        amount = int(match.group(1)) * (7 if match.group(2).lower() == "week" else 1)
        return -amount if match.group(3).lower() == "before" else amount

    lowered = hint.lower()
    for keyword, offset in _SEASON_OFFSETS:
        if keyword in lowered:
            return offset

    logger.debug("Unrecognised planting hint '%s', planting at last frost", hint)
    return 0


def _stress_shift(weather: WeatherSample) -> int:
    if weather.stress_days > 30:
        return -7
    if weather.stress_days > 15:
        return -3
    return 0


def _freeze_shift(weather: WeatherSample) -> int:
    if weather.freeze_events > 15:
        return 7
    if weather.freeze_events > 8:
        return 3
    return 0


def _confidence(
    base: float,
    weather: WeatherSample,
    location: LocationConfig,
    bounds: Tuple[float, float],
) -> float:
    confidence = base
    if weather.stress_days > 30:
        confidence -= 0.15
    elif weather.stress_days > 15:
        confidence -= 0.05
    if weather.freeze_events > 15:
        confidence -= 0.15
    elif weather.freeze_events > 8:
        confidence -= 0.05
    ratio = weather.annual_rainfall / location.avg_rainfall
    if not NORMAL_RAINFALL_BAND[0] <= ratio <= NORMAL_RAINFALL_BAND[1]:
        confidence -= 0.10
    return min(bounds[1], max(bounds[0], confidence))


def maturity_days(crop: CropReference, weather: WeatherSample) -> int:
    """Days to first harvest under an iteration's heat and freeze stress."""
    days = float(crop.days_to_maturity)
    if weather.stress_days > 15:
        days *= 0.9 if crop.heat_accelerated else 1.1
    if weather.freeze_events > 8:
        days *= 1.1
    return int(math.floor(days + 0.5))


def _critical_events(weather: WeatherSample, frost: date) -> List[CriticalEvent]:
    events = []
    if weather.stress_days > 15:
        events.append(
            CriticalEvent(
                type="irrigation_assessment",
                date=frost + timedelta(days=45),
                description="Assess irrigation capacity before summer heat stress",
                priority="high",
                confidence=0.7,
            )
        )
    if weather.stress_days > 30:
        events.append(
            CriticalEvent(
                type="heat_protection",
                date=frost + timedelta(days=60),
                description="Deploy shade cloth and heat protection",
                priority="critical",
                confidence=0.8,
            )
        )
    if weather.freeze_events > 15:
        events.append(
            CriticalEvent(
                type="frost_protection",
                date=frost - timedelta(days=14),
                description="Prepare frost covers for late freezes",
                priority="high",
                confidence=0.65,
            )
        )
    return events


def summarize_weather_events(
    weather: WeatherSample, location: LocationConfig
) -> List[WeatherEvent]:
    """Classify a sample into heat wave, drought, excess rain and hard freeze events."""
    events = []
    if weather.stress_days > 15:
        if weather.stress_days > 45:
            severity = "high"
        elif weather.stress_days > 30:
            severity = "moderate"
        else:
            severity = "low"
        events.append(WeatherEvent("heat_wave", severity))

    ratio = weather.annual_rainfall / location.avg_rainfall
    if ratio < NORMAL_RAINFALL_BAND[0]:
        events.append(WeatherEvent("drought", "high" if ratio < 0.5 else "moderate"))
    elif ratio > NORMAL_RAINFALL_BAND[1]:
        events.append(WeatherEvent("excess_rain", "high" if ratio > 1.5 else "moderate"))

    if weather.freeze_events > 8:
        events.append(
            WeatherEvent("hard_freeze", "high" if weather.freeze_events > 15 else "moderate")
        )

    if not events:
        events.append(WeatherEvent("typical", "low"))
    return events


def generate_calendar_from_scenario(
    portfolio: Mapping[str, float],
    weather: WeatherSample,
    location: Optional[LocationConfig] = None,
    crop_catalog: Optional[CropCatalog] = None,
    year: Optional[int] = None,
) -> ScenarioCalendar:
    """Build the calendar of one simulated year.

    Args:
        portfolio: Category allocation percentages; only categories with a
            positive allocation are planted.
        weather: The iteration's weather sample.
        location: Site descriptors; defaults apply when None.
        crop_catalog: Crop reference table; the default table when None.
        year: Calendar year; the current year when None.

    Returns:
        Planting, harvest and critical events plus a weather-event summary.
    """
    location = location or LocationConfig()
    catalog = resolve_catalog(crop_catalog)
    year = year if year is not None else date.today().year

    frost = location.last_frost_date(year) + timedelta(days=frost_shift_days(weather.freeze_events))
    weather_shift = _stress_shift(weather) + _freeze_shift(weather)
    planting_confidence = _confidence(
        PLANTING_BASE_CONFIDENCE, weather, location, PLANTING_CONFIDENCE_BOUNDS
    )
    harvest_confidence = _confidence(
        HARVEST_BASE_CONFIDENCE, weather, location, HARVEST_CONFIDENCE_BOUNDS
    )
    before, after = PLANTING_WINDOW
    to_peak, to_last = HARVEST_OFFSETS

    plantings: List[PlantingEvent] = []
    harvests: List[HarvestEvent] = []
    for category, allocation in portfolio.items():
        if not allocation or allocation <= 0:
            continue
        crop_type = getattr(category, "value", category)
        for crop in catalog.crops_for(crop_type):
            optimal = frost + timedelta(
                days=planting_offset_days(crop.planting_season) + weather_shift
            )
            plantings.append(
                PlantingEvent(
                    crop=crop.name,
                    crop_key=crop.key,
                    crop_type=crop_type,
                    optimal_date=optimal,
                    early_date=optimal - timedelta(days=before),
                    late_date=optimal + timedelta(days=after),
                    confidence=planting_confidence,
                )
            )
            first = optimal + timedelta(days=maturity_days(crop, weather))
            harvests.append(
                HarvestEvent(
                    crop=crop.name,
                    crop_key=crop.key,
                    crop_type=crop_type,
                    first_harvest=first,
                    peak_harvest=first + timedelta(days=to_peak),
                    last_harvest=first + timedelta(days=to_last),
                    confidence=harvest_confidence,
                )
            )

    return ScenarioCalendar(
        planting_events=tuple(plantings),
        harvest_events=tuple(harvests),
        critical_events=tuple(_critical_events(weather, frost)),
        weather_events=tuple(summarize_weather_events(weather, location)),
        adjusted_last_frost=frost,
    )
