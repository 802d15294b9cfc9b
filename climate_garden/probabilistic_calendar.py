"""Consensus calendar across simulated seasons.

Every iteration carries its own calendar. This module groups the events of
all those calendars and reports, per crop and per critical task, the median
date, the median window, the mean confidence and how strongly the scenarios
agree, together with a one-line guidance sentence for the gardener.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta, timezone
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .calendar_generator import CriticalEvent, HarvestEvent, PlantingEvent, ScenarioCalendar
from .config.constants import (
    CONSENSUS_WINDOW_DAYS,
    CRITICAL_EVENT_MIN_FREQUENCY,
    HARVEST_OFFSETS,
    PLANTING_WINDOW,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlantingRecommendation:
    """Consensus planting window of one crop."""

    crop: str
    crop_key: str
    crop_type: str
    optimal_date: date
    early_date: date
    late_date: date
    confidence: float
    consensus_strength: float
    scenario_count: int
    recommendation: str = ""


@dataclass(frozen=True)
class HarvestPrediction:
    """Consensus harvest window of one crop."""

    crop: str
    crop_key: str
    crop_type: str
    first_harvest: date
    peak_harvest: date
    last_harvest: date
    confidence: float
    consensus_strength: float
    scenario_count: int
    prediction: str = ""


@dataclass(frozen=True)
class CriticalEventSummary:
    """A garden task that recurs across scenarios.

    ``frequency`` is the share of scenarios in which the task occurred.
    """

    type: str
    date: date
    description: str
    priority: str
    confidence: float
    frequency: float
    consensus_strength: float
    scenario_count: int
    recommendation: str = ""


@dataclass(frozen=True)
class ProbabilisticCalendar:
    """Consensus calendar of a Monte Carlo run."""

    planting_recommendations: List[PlantingRecommendation] = field(default_factory=list)
    harvest_predictions: List[HarvestPrediction] = field(default_factory=list)
    critical_events: List[CriticalEventSummary] = field(default_factory=list)
    total_scenarios: int = 0
    generated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form with ISO dates."""
        result = asdict(self)
        for key in ("planting_recommendations", "harvest_predictions", "critical_events"):
            result[key] = [
                {k: v.isoformat() if isinstance(v, date) else v for k, v in entry.items()}
                for entry in result[key]
            ]
        result["generated_at"] = self.generated_at.isoformat() if self.generated_at else None
        return result


def median_date(dates: Sequence[date]) -> date:
    """Median of dates; an even count takes the midpoint rounded half up."""
    ordinals = sorted(d.toordinal() for d in dates)
    n = len(ordinals)
    mid = n // 2
    if n % 2:
        return date.fromordinal(ordinals[mid])
    return date.fromordinal(int(math.floor((ordinals[mid - 1] + ordinals[mid]) / 2 + 0.5)))


def consensus_strength(dates: Sequence[date], consensus: date) -> float:
    """Share of dates within the consensus window of ``consensus``."""
    close = sum(1 for d in dates if abs((d - consensus).days) <= CONSENSUS_WINDOW_DAYS)
    return close / len(dates)


def _median_bound(values: Iterable[Optional[date]], fallback: date) -> date:
    present = [v for v in values if v is not None]
    return median_date(present) if present else fallback


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values)


def agreement_label(strength: float) -> str:
    """Describe how strongly the scenarios agree on a date."""
    if strength >= 0.8:
        return "strong"
    if strength >= 0.5:
        return "moderate"
    return "weak"


def _planting_text(crop: str, optimal: date, early: date, late: date, strength: float) -> str:
    text = (
        f"Plant {crop} around {optimal:%b %d} (window {early:%b %d} - {late:%b %d}); "
        f"{agreement_label(strength)} agreement across scenarios"
    )
    if strength < 0.5:
        text += ", watch the forecast before committing"
    return text


def _harvest_text(crop: str, first: date, peak: date, last: date, strength: float) -> str:
    return (
        f"Expect {crop} from {first:%b %d}, peaking around {peak:%b %d} "
        f"and finishing by {last:%b %d}; {agreement_label(strength)} agreement across scenarios"
    )


def _critical_text(description: str, on: date, frequency: float) -> str:
    return f"{description} by {on:%b %d} (needed in {frequency:.0%} of scenarios)"


def _calendars(calendars_or_iterations: Iterable[Any]) -> List[ScenarioCalendar]:
    return [getattr(item, "calendar", item) for item in calendars_or_iterations]


def _plantings(groups: Dict[Tuple[str, str], List[PlantingEvent]]) -> List[PlantingRecommendation]:
    before, after = PLANTING_WINDOW
    recommendations = []
    for (crop_key, crop_type), events in groups.items():
        crop = events[0].crop
        optimal = median_date([e.optimal_date for e in events])
        early = _median_bound((e.early_date for e in events), optimal - timedelta(days=before))
        late = _median_bound((e.late_date for e in events), optimal + timedelta(days=after))
        strength = consensus_strength([e.optimal_date for e in events], optimal)
        recommendations.append(
            PlantingRecommendation(
                crop=crop,
                crop_key=crop_key,
                crop_type=crop_type,
                optimal_date=optimal,
                early_date=early,
                late_date=late,
                confidence=_mean(e.confidence for e in events),
                consensus_strength=strength,
                scenario_count=len(events),
                recommendation=_planting_text(crop, optimal, early, late, strength),
            )
        )
    recommendations.sort(key=lambda r: (r.optimal_date, r.crop_key, r.crop_type))
    return recommendations


def _harvests(groups: Dict[Tuple[str, str], List[HarvestEvent]]) -> List[HarvestPrediction]:
    to_peak, to_last = HARVEST_OFFSETS
    predictions = []
    for (crop_key, crop_type), events in groups.items():
        crop = events[0].crop
        first = median_date([e.first_harvest for e in events])
        peak = _median_bound((e.peak_harvest for e in events), first + timedelta(days=to_peak))
        last = _median_bound((e.last_harvest for e in events), first + timedelta(days=to_last))
        strength = consensus_strength([e.first_harvest for e in events], first)
        predictions.append(
            HarvestPrediction(
                crop=crop,
                crop_key=crop_key,
                crop_type=crop_type,
                first_harvest=first,
                peak_harvest=peak,
                last_harvest=last,
                confidence=_mean(e.confidence for e in events),
                consensus_strength=strength,
                scenario_count=len(events),
                prediction=_harvest_text(crop, first, peak, last, strength),
            )
        )
    predictions.sort(key=lambda p: (p.first_harvest, p.crop_key, p.crop_type))
    return predictions


def _critical(
    groups: Dict[str, List[CriticalEvent]], total: int
) -> List[CriticalEventSummary]:
    summaries = []
    for event_type, events in groups.items():
        frequency = len(events) / total
        if frequency < CRITICAL_EVENT_MIN_FREQUENCY:
            logger.debug(
                "Dropping critical event '%s' seen in %.0f%% of scenarios",
                event_type,
                frequency * 100,
            )
            continue
        dates = [e.date for e in events]
        consensus = median_date(dates)
        summaries.append(
            CriticalEventSummary(
                type=event_type,
                date=consensus,
                description=events[0].description,
                priority=events[0].priority,
                confidence=_mean(e.confidence for e in events),
                frequency=frequency,
                consensus_strength=consensus_strength(dates, consensus),
                scenario_count=len(events),
                recommendation=_critical_text(events[0].description, consensus, frequency),
            )
        )
    summaries.sort(key=lambda s: (s.date, s.type))
    return summaries


def generate_probabilistic_calendar(
    calendars_or_iterations: Iterable[Any],
    generated_at: Optional[datetime] = None,
) -> ProbabilisticCalendar:
    """Synthesize a consensus calendar from per-scenario calendars.

    Planting and harvest events are grouped by ``(crop_key, crop_type)`` and
    critical events by type. Each group reports the median date, the median
    bounds (falling back to the standard planting and harvest windows when no
    member carries a bound), the mean confidence and the share of members
    within two weeks of the median. Critical events seen in fewer than 20% of
    scenarios are dropped.

    Args:
        calendars_or_iterations: :class:`ScenarioCalendar` objects, or
            iteration records exposing a ``calendar`` attribute.
        generated_at: Generation timestamp; UTC now when None.

    Returns:
        Chronologically sorted recommendations, predictions and critical
        events.
    """
    calendars = _calendars(calendars_or_iterations)
    generated_at = generated_at or datetime.now(timezone.utc)
    total = len(calendars)
    if total == 0:
        logger.info("No scenarios to synthesize a calendar from")
        return ProbabilisticCalendar(total_scenarios=0, generated_at=generated_at)

    plantings: Dict[Tuple[str, str], List[PlantingEvent]] = {}
    harvests: Dict[Tuple[str, str], List[HarvestEvent]] = {}
    critical: Dict[str, List[CriticalEvent]] = {}
    for calendar in calendars:
        for planting in calendar.planting_events:
            plantings.setdefault((planting.crop_key, planting.crop_type), []).append(planting)
        for harvest in calendar.harvest_events:
            harvests.setdefault((harvest.crop_key, harvest.crop_type), []).append(harvest)
        for event in calendar.critical_events:
            critical.setdefault(event.type, []).append(event)

    return ProbabilisticCalendar(
        planting_recommendations=_plantings(plantings),
        harvest_predictions=_harvests(harvests),
        critical_events=_critical(critical, total),
        total_scenarios=total,
        generated_at=generated_at,
    )
