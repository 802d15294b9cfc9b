"""Summary statistics and histograms of simulated garden seasons.

This module aggregates Monte Carlo iterations into net-return, ROI and
harvest-value statistics, bins values into equal-width histograms and builds
the weather-risk view of a run.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence
import warnings

import numpy as np
import pandas as pd
from scipy import stats

from ._warnings import DataQualityWarning
from .config.weather import WeatherForecast

logger = logging.getLogger(__name__)

PERCENTILES = {"p10": 10, "p25": 25, "p75": 75, "p90": 90}
WEATHER_RISK_BINS = 15


@dataclass(frozen=True)
class MetricSummary:
    """Location and spread of one simulated metric."""

    mean: float = 0.0
    median: float = 0.0
    std: float = 0.0


@dataclass(frozen=True)
class Statistics:
    """Aggregated outcome of a Monte Carlo run.

    Net-return statistics sit at the top level; ROI and harvest value carry
    their own :class:`MetricSummary`.

    Attributes:
        mean: Mean net return.
        median: Median net return.
        std: Sample standard deviation of net return (0 for one iteration).
        percentiles: Net-return percentiles ``p10``, ``p25``, ``p75``, ``p90``.
        roi: ROI summary (percent).
        harvest_value: Harvest value summary.
        success_rate: Percentage of iterations with a positive net return.
        valid_count: Number of iterations aggregated.
        skewness: Skewness of net return (0 when undefined).
    """

    mean: float
    median: float
    std: float
    percentiles: Dict[str, float]
    roi: MetricSummary
    harvest_value: MetricSummary
    success_rate: float
    valid_count: int
    skewness: float = 0.0

    @classmethod
    def empty(cls) -> "Statistics":
        """All-zero statistics for a run with no valid iterations."""
        return cls(
            mean=0.0,
            median=0.0,
            std=0.0,
            percentiles={key: 0.0 for key in PERCENTILES},
            roi=MetricSummary(),
            harvest_value=MetricSummary(),
            success_rate=0.0,
            valid_count=0,
            skewness=0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain-dict form."""
        return asdict(self)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert statistics to a long-form pandas DataFrame.

        Returns:
            DataFrame with ``category``, ``metric`` and ``value`` columns
        """
        rows = [
            {"category": "net_return", "metric": "mean", "value": self.mean},
            {"category": "net_return", "metric": "median", "value": self.median},
            {"category": "net_return", "metric": "std", "value": self.std},
            {"category": "net_return", "metric": "skewness", "value": self.skewness},
        ]
        for key, value in self.percentiles.items():
            rows.append({"category": "net_return", "metric": key, "value": value})
        for category, summary in (("roi", self.roi), ("harvest_value", self.harvest_value)):
            for metric, value in asdict(summary).items():
                rows.append({"category": category, "metric": metric, "value": value})
        rows.append({"category": "outcome", "metric": "success_rate", "value": self.success_rate})
        rows.append(
            {"category": "outcome", "metric": "valid_count", "value": float(self.valid_count)}
        )
        return pd.DataFrame(rows)


def _summarize(values: np.ndarray) -> MetricSummary:
    ddof = 1 if len(values) > 1 else 0
    return MetricSummary(
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values, ddof=ddof)),
    )


def _safe_skew(values: np.ndarray) -> float:
    """Skewness with precision warnings suppressed; 0 when undefined."""
    if len(values) < 3:
        return 0.0
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Precision loss occurred")
        warnings.filterwarnings("ignore", category=RuntimeWarning)
        skew = float(stats.skew(values))
    return skew if math.isfinite(skew) else 0.0


def calculate_statistics(iterations: Sequence[Any]) -> Statistics:
    """Aggregate iterations into :class:`Statistics`.

    Iterations whose net return, ROI or harvest value is not finite are
    dropped with a :class:`DataQualityWarning`.

    Args:
        iterations: Records exposing ``net_return``, ``roi`` and
            ``harvest_value``.

    Returns:
        Statistics over the finite iterations, or :meth:`Statistics.empty`
        when none remain.
    """
    if len(iterations) == 0:
        return Statistics.empty()

    net = np.array([it.net_return for it in iterations], dtype=float)
    roi = np.array([it.roi for it in iterations], dtype=float)
    harvest = np.array([it.harvest_value for it in iterations], dtype=float)

    valid = np.isfinite(net) & np.isfinite(roi) & np.isfinite(harvest)
    dropped = int(len(valid) - np.count_nonzero(valid))
    if dropped:
        logger.warning("Dropping %d iterations with non-finite results", dropped)
        warnings.warn(
            f"Dropped {dropped} of {len(valid)} iterations with non-finite results",
            DataQualityWarning,
            stacklevel=2,
        )
    net, roi, harvest = net[valid], roi[valid], harvest[valid]

    if len(net) == 0:
        return Statistics.empty()

    summary = _summarize(net)
    return Statistics(
        mean=summary.mean,
        median=summary.median,
        std=summary.std,
        percentiles={key: float(np.percentile(net, q)) for key, q in PERCENTILES.items()},
        roi=_summarize(roi),
        harvest_value=_summarize(harvest),
        success_rate=float(np.count_nonzero(net > 0) / len(net) * 100),
        valid_count=int(len(net)),
        skewness=_safe_skew(net),
    )


@dataclass(frozen=True)
class HistogramBin:
    """One equal-width histogram bin, ``[lower, upper)`` (last bin closed)."""

    lower: float
    upper: float
    count: int

    @property
    def center(self) -> float:
        return (self.lower + self.upper) / 2


def generate_histogram_data(data: Iterable[float], bins: int = 25) -> List[HistogramBin]:
    """Bin values into equal-width bins.

    Non-finite values are ignored, so the counts sum to the number of finite
    inputs.

    Args:
        data: Values to bin.
        bins: Number of bins.

    Returns:
        ``bins`` bins spanning the finite data, or ``[]`` when there is none.

    Raises:
        ValueError: If ``bins`` is less than 1.
    """
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")
    values = np.asarray(list(data), dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return []

    counts, edges = np.histogram(values, bins=bins)
    return [
        HistogramBin(lower=float(edges[i]), upper=float(edges[i + 1]), count=int(counts[i]))
        for i in range(len(counts))
    ]


@dataclass(frozen=True)
class RealWeatherContext:
    """Forecast snapshot reported alongside weather-risk histograms."""

    current_temperature: Optional[float]
    next_week_gdd: float
    next_week_precipitation: float
    data_source: str
    timestamp: Optional[datetime]


@dataclass(frozen=True)
class WeatherRiskData:
    """Distribution of the sampled weather of a run.

    Attributes:
        stress_days: Histogram of heat-stress days.
        freeze_events: Histogram of freeze events.
        rainfall: Histogram of annual rainfall.
        real_weather: Forecast context when a forecast was supplied.
    """

    stress_days: List[HistogramBin] = field(default_factory=list)
    freeze_events: List[HistogramBin] = field(default_factory=list)
    rainfall: List[HistogramBin] = field(default_factory=list)
    real_weather: Optional[RealWeatherContext] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form with ISO timestamps."""
        result = asdict(self)
        if self.real_weather is not None and self.real_weather.timestamp is not None:
            result["real_weather"]["timestamp"] = self.real_weather.timestamp.isoformat()
        return result


def generate_weather_risk_data(
    iterations: Sequence[Any], weather_data: Optional[WeatherForecast] = None
) -> WeatherRiskData:
    """Histogram the weather samples of a run.

    Args:
        iterations: Records exposing a ``weather`` sample.
        weather_data: Forecast the run used, if any.

    Returns:
        Histograms of stress days, freeze events and rainfall, plus the
        forecast context when ``weather_data`` has forecast days.
    """
    samples = [it.weather for it in iterations]
    real_weather = None
    if weather_data is not None and weather_data.is_usable:
        week = weather_data.week()
        real_weather = RealWeatherContext(
            current_temperature=weather_data.current.temperature,
            next_week_gdd=float(sum(day.growing_degree_days for day in week)),
            next_week_precipitation=float(sum(day.precipitation for day in week)),
            data_source="forecast",
            timestamp=weather_data.timestamp,
        )

    return WeatherRiskData(
        stress_days=generate_histogram_data((s.stress_days for s in samples), WEATHER_RISK_BINS),
        freeze_events=generate_histogram_data(
            (s.freeze_events for s in samples), WEATHER_RISK_BINS
        ),
        rainfall=generate_histogram_data((s.annual_rainfall for s in samples), WEATHER_RISK_BINS),
        real_weather=real_weather,
    )
