"""Single-call pipeline for garden plan simulations.

Provides ``run_complete_simulation()``, which derives the plan's parameters,
runs the Monte Carlo engine, aggregates statistics and histograms, and
synthesizes the consensus calendar.

Examples:
    Minimal usage::

        from climate_garden import SimulationConfig, run_complete_simulation

        config = SimulationConfig(
            portfolio={"heat_specialists": 40, "cool_season": 35, "perennials": 25},
            base_investment=400,
            selected_summer="extreme",
        )
        results = run_complete_simulation(config, iterations=1000, seed=42)
        print(results.summary())

    From a YAML file::

        config = Config.from_yaml("garden.yaml")
        results = run_complete_simulation(config)
        df = results.to_dataframe()
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
import logging
import threading
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .config.core import Config
from .config.simulation import RunConfig, SimulationConfig
from .crop_catalog import CropCatalog
from .monte_carlo import MonteCarloConfig, MonteCarloEngine, ProgressCallback, SimulationIteration
from .parameters import SimulationParameters
from .probabilistic_calendar import ProbabilisticCalendar, generate_probabilistic_calendar
from .summary_statistics import (
    HistogramBin,
    Statistics,
    WeatherRiskData,
    calculate_statistics,
    generate_histogram_data,
    generate_weather_risk_data,
)

logger = logging.getLogger(__name__)


@dataclass
class SimulationResults:
    """Container for ``run_complete_simulation()`` output.

    Attributes:
        statistics: Aggregated net-return, ROI and harvest statistics.
        iterations: Raw iteration records.
        return_histogram: Histogram of net returns.
        roi_histogram: Histogram of ROI.
        calendar: Consensus planting and harvest calendar.
        weather_risk_data: Histograms of the sampled weather.
        parameters: Distributions the run sampled from.
        weather_enhanced: Whether a forecast adjusted the parameters.
        weather_timestamp: Timestamp of that forecast.
        cancelled: Whether the run stopped early.
        execution_time: Wall-clock time of the Monte Carlo run in seconds.
    """

    statistics: Statistics
    iterations: List[SimulationIteration]
    return_histogram: List[HistogramBin]
    roi_histogram: List[HistogramBin]
    calendar: ProbabilisticCalendar
    weather_risk_data: WeatherRiskData
    parameters: SimulationParameters
    weather_enhanced: bool = False
    weather_timestamp: Optional[datetime] = None
    cancelled: bool = False
    execution_time: float = 0.0
    _summary_cache: Optional[str] = field(default=None, repr=False)

    def summary(self) -> str:
        """Return a human-readable summary of the simulation.

        Returns:
            str: Multi-line formatted summary.
        """
        if self._summary_cache is not None:
            return self._summary_cache

        stats = self.statistics
        sufficiency = self.parameters.investment_sufficiency
        lines: List[str] = []
        lines.append("=" * 60)
        lines.append("Garden Plan Simulation Summary")
        lines.append("=" * 60)
        lines.append(f"Iterations: {stats.valid_count}{' (cancelled)' if self.cancelled else ''}")
        weather = "forecast-adjusted" if self.weather_enhanced else "scenario only"
        lines.append(f"Weather: {weather}")

        lines.append("")
        lines.append("--- Net Return ---")
        lines.append(f"Mean: ${stats.mean:,.2f}")
        lines.append(f"Median: ${stats.median:,.2f}")
        lines.append(f"Std Dev: ${stats.std:,.2f}")
        lines.append(
            f"P10 / P90: ${stats.percentiles['p10']:,.2f} / ${stats.percentiles['p90']:,.2f}"
        )
        lines.append(f"Success Rate: {stats.success_rate:.1f}%")
        lines.append(f"Mean ROI: {stats.roi.mean:.1f}%")
        lines.append(f"Mean Harvest Value: ${stats.harvest_value.mean:,.2f}")

        lines.append("")
        lines.append("--- Investment ---")
        lines.append(f"Required: ${self.parameters.required_investment.total:,.2f}")
        lines.append(
            f"Sufficiency: {sufficiency.status} ({sufficiency.ratio:.2f}x, {sufficiency.level})"
        )
        for recommendation in sufficiency.recommendations:
            lines.append(f"  - {recommendation}")

        if self.calendar.planting_recommendations:
            lines.append("")
            lines.append("--- Planting Calendar ---")
            for rec in self.calendar.planting_recommendations:
                lines.append(
                    f"{rec.optimal_date:%b %d}  {rec.crop} "
                    f"({rec.early_date:%b %d} - {rec.late_date:%b %d}, "
                    f"{rec.consensus_strength:.0%} agreement)"
                )

        if self.calendar.critical_events:
            lines.append("")
            lines.append("--- Critical Events ---")
            for event in self.calendar.critical_events:
                lines.append(
                    f"{event.date:%b %d}  {event.type} [{event.priority}] "
                    f"in {event.frequency:.0%} of scenarios"
                )

        lines.append("=" * 60)
        text = "\n".join(lines)
        self._summary_cache = text
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form of the results.

        Calendars of individual iterations are not included; the consensus
        calendar is. ``weather_timestamp`` is present only when a forecast
        adjusted the run.
        """
        result: Dict[str, Any] = {
            "statistics": self.statistics.to_dict(),
            "iterations": self.to_dataframe().to_dict(orient="records"),
            "return_histogram": [asdict(b) for b in self.return_histogram],
            "roi_histogram": [asdict(b) for b in self.roi_histogram],
            "calendar": self.calendar.to_dict(),
            "weather_risk_data": self.weather_risk_data.to_dict(),
            "required_investment": asdict(self.parameters.required_investment),
            "investment_sufficiency": asdict(self.parameters.investment_sufficiency),
            "weather_enhanced": self.weather_enhanced,
            "cancelled": self.cancelled,
        }
        if self.weather_enhanced:
            result["weather_timestamp"] = (
                self.weather_timestamp.isoformat() if self.weather_timestamp else None
            )
        return result

    def to_dataframe(self) -> pd.DataFrame:
        """Export per-iteration financial and weather values to a DataFrame.

        Returns:
            pd.DataFrame: One row per iteration.
        """
        rows: List[Dict[str, Any]] = []
        for i, it in enumerate(self.iterations):
            rows.append(
                {
                    "iteration": i,
                    "harvest_value": it.harvest_value,
                    "investment": it.investment,
                    "net_return": it.net_return,
                    "roi": it.roi,
                    "heat_yield": it.heat_yield,
                    "cool_yield": it.cool_yield,
                    "perennial_yield": it.perennial_yield,
                    "stress_days": it.weather.stress_days,
                    "freeze_events": it.weather.freeze_events,
                    "annual_rainfall": it.weather.annual_rainfall,
                    "weather_source": it.weather.data_source,
                }
            )
        return pd.DataFrame(rows)


def _resolve_run(
    config: Union[Config, SimulationConfig],
    iterations: Optional[int],
    seed: Optional[int],
):
    if isinstance(config, Config):
        run = MonteCarloConfig.from_run_config(config.run, iterations)
        sim_config = config.simulation
        bins = config.run.histogram_bins
    else:
        defaults = RunConfig()
        run = MonteCarloConfig(
            iterations=iterations if iterations is not None else defaults.iterations
        )
        sim_config = config
        bins = defaults.histogram_bins
    if seed is not None:
        run.seed = seed
    return sim_config, run, bins


def run_complete_simulation(
    config: Union[Config, SimulationConfig],
    iterations: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    crop_catalog: Optional[CropCatalog] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    generated_at: Optional[datetime] = None,
) -> SimulationResults:
    """Simulate a garden plan end to end.

    Args:
        config: Garden inputs, or a full :class:`Config` whose ``run``
            section supplies the run control.
        iterations: Iteration count; overrides the configured count.
        rng: Parent generator used when no seed is given.
        seed: Random seed; overrides the configured seed.
        crop_catalog: Crop reference table (default table if None).
        progress_callback: Called with ``(completed, total, elapsed)``.
        cancel_event: Stops the run early when set.
        generated_at: Timestamp of the consensus calendar (UTC now if None).

    Returns:
        SimulationResults for the plan.

    Raises:
        PortfolioError: If the portfolio is missing or malformed.
        ValueError: If the run control is invalid.
    """
    sim_config, run, bins = _resolve_run(config, iterations, seed)

    engine = MonteCarloEngine(sim_config, crop_catalog=crop_catalog, rng=rng, run_config=run)
    mc = engine.run(progress_callback=progress_callback, cancel_event=cancel_event)
    iterations_run = mc.iterations
    params = mc.parameters

    weather_enhanced = params.weather_adjustments is not None
    if not weather_enhanced:
        logger.info("Simulation ran without forecast adjustment")

    results = SimulationResults(
        statistics=calculate_statistics(iterations_run),
        iterations=iterations_run,
        return_histogram=generate_histogram_data((it.net_return for it in iterations_run), bins),
        roi_histogram=generate_histogram_data((it.roi for it in iterations_run), bins),
        calendar=generate_probabilistic_calendar(iterations_run, generated_at=generated_at),
        weather_risk_data=generate_weather_risk_data(iterations_run, sim_config.weather_data),
        parameters=params,
        weather_enhanced=weather_enhanced,
        weather_timestamp=params.weather_timestamp if weather_enhanced else None,
        cancelled=mc.cancelled,
        execution_time=mc.execution_time,
    )
    logger.info(
        "Simulation complete: mean net return %.2f, success rate %.1f%%",
        results.statistics.mean,
        results.statistics.success_rate,
    )
    return results
