"""Monte Carlo runner for garden plans.

Draws harvest, investment and per-category yield values from the
distributions produced by :mod:`climate_garden.parameters`, pairs every draw
with a weather sample and the calendar that weather implies, and returns one
:class:`SimulationIteration` per iteration.

Work is split into fixed-size chunks. Every chunk owns a
:class:`numpy.random.Generator` spawned from a single
:class:`numpy.random.SeedSequence`, so a seeded run produces the same
iterations whether its chunks run one after another or on a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from concurrent.futures import as_completed
from dataclasses import asdict, dataclass, field, replace
from datetime import date
import logging
import os
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .calendar_generator import ScenarioCalendar, generate_calendar_from_scenario
from .config.simulation import RunConfig, SimulationConfig
from .crop_catalog import CropCatalog, resolve_catalog
from .parameters import DistributionParams, SimulationParameters, generate_simulation_parameters
from .weather_integration import generate_weather_samples_from_forecast
from .weather_sampler import WeatherSample, generate_weather_samples

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, float], None]


@dataclass
class MonteCarloConfig:
    """Run control for the Monte Carlo engine.

    Attributes:
        iterations: Number of iterations to simulate
        seed: Random seed for reproducibility (None for fresh entropy)
        parallel: Run chunks on a thread pool
        n_workers: Number of worker threads (None for auto)
        chunk_size: Iterations per independently seeded chunk
        progress_bar: Show a tqdm progress bar
        timeout_seconds: Stop after this many seconds and return the
            completed chunks (None for no limit). Sequential runs check the
            budget between chunks; parallel runs stop waiting as soon as it
            expires
    """

    iterations: int = 1000
    seed: Optional[int] = None
    parallel: bool = False
    n_workers: Optional[int] = None
    chunk_size: int = 250
    progress_bar: bool = False
    timeout_seconds: Optional[float] = None

    def __post_init__(self):
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is out of its valid range.
        """
        if self.iterations <= 0:
            raise ValueError(
                f"iterations must be positive, got {self.iterations}. "
                "Use at least 500 for stable percentiles."
            )
        if self.chunk_size <= 0:
            raise ValueError(
                f"chunk_size must be positive, got {self.chunk_size}. "
                "Typical values are 100-1000."
            )
        if self.n_workers is not None and self.n_workers < 1:
            raise ValueError(
                f"n_workers must be >= 1, got {self.n_workers}. "
                "Leave it as None to pick a worker count automatically."
            )
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}. "
                "Leave it as None to run without a time budget."
            )
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}.")

    @classmethod
    def from_run_config(
        cls, run: RunConfig, iterations: Optional[int] = None
    ) -> "MonteCarloConfig":
        """Build from the YAML-level run settings, optionally overriding iterations."""
        return cls(
            iterations=iterations if iterations is not None else run.iterations,
            seed=run.seed,
            parallel=run.parallel,
            n_workers=run.n_workers,
            chunk_size=run.chunk_size,
            progress_bar=run.progress_bar,
            timeout_seconds=run.timeout_seconds,
        )


@dataclass(frozen=True)
class SimulationIteration:
    """Outcome of one simulated season.

    Attributes:
        harvest_value: Harvest value in dollars.
        investment: Actual spend in dollars.
        net_return: ``harvest_value - investment``.
        roi: ``net_return / investment * 100``, or 0 when investment <= 0.
        heat_yield: Heat-specialist yield value.
        cool_yield: Cool-season yield value.
        perennial_yield: Perennial yield value.
        weather: Weather sample of the season.
        calendar: Planting and harvest calendar implied by the weather.
    """

    harvest_value: float
    investment: float
    net_return: float
    roi: float
    heat_yield: float
    cool_yield: float
    perennial_yield: float
    weather: WeatherSample
    calendar: ScenarioCalendar


@dataclass
class MonteCarloResults:
    """Results of a Monte Carlo run.

    Attributes:
        iterations: One record per completed iteration, in iteration order
        parameters: Distributions the draws were taken from
        execution_time: Wall-clock time of the run in seconds
        config: Run control used
        cancelled: True when the run stopped early (cancel event or timeout)
        replaced_draws: Number of non-finite draws replaced by their mean
        weather_sources: Iteration count per weather data source
    """

    iterations: List[SimulationIteration]
    parameters: SimulationParameters
    execution_time: float
    config: MonteCarloConfig
    cancelled: bool = False
    replaced_draws: int = 0
    weather_sources: Dict[str, int] = field(default_factory=dict)

    @property
    def completed(self) -> int:
        """Number of iterations actually simulated."""
        return len(self.iterations)

    def to_dataframe(self) -> pd.DataFrame:
        """Flatten the iterations (without calendars) into a DataFrame."""
        rows = []
        for it in self.iterations:
            row: Dict[str, Any] = {
                "harvest_value": it.harvest_value,
                "investment": it.investment,
                "net_return": it.net_return,
                "roi": it.roi,
                "heat_yield": it.heat_yield,
                "cool_yield": it.cool_yield,
                "perennial_yield": it.perennial_yield,
            }
            row.update(asdict(it.weather))
            rows.append(row)
        return pd.DataFrame(rows)

    def summary(self) -> str:
        """Generate summary of simulation results."""
        net = np.array([it.net_return for it in self.iterations], dtype=float)
        status = "cancelled" if self.cancelled else "complete"
        lines = [
            "Monte Carlo Run Summary",
            "=" * 50,
            f"Iterations: {self.completed:,} of {self.config.iterations:,} ({status})",
            f"Execution Time: {self.execution_time:.2f}s",
            f"Expected Harvest: ${self.parameters.harvest.mean:,.2f}",
            f"Expected Investment: ${self.parameters.investment.mean:,.2f}",
            f"Analytic P(profit): {self.parameters.probability_of_profit():.1%}",
        ]
        if len(net):
            lines.append(f"Mean Net Return: ${np.mean(net):,.2f}")
            lines.append(f"Simulated P(profit): {np.mean(net > 0):.1%}")
        if self.replaced_draws:
            lines.append(f"Replaced non-finite draws: {self.replaced_draws}")
        return "\n".join(lines)


def _draw(
    rng: np.random.Generator, dist: DistributionParams, size: int
) -> Tuple[np.ndarray, int]:
    """Normal draws with non-finite values replaced by the mean."""
    values = rng.normal(dist.mean, dist.std, size=size)
    bad = ~np.isfinite(values)
    n_bad = int(np.count_nonzero(bad))
    if n_bad:
        values[bad] = dist.mean
    return values, n_bad


class MonteCarloEngine:
    """Monte Carlo engine for a garden plan.

    Distribution parameters and the required-investment snapshot are derived
    once, when the engine is created; :meth:`run` only samples.

    Examples:
        Seeded run on a thread pool::

            engine = MonteCarloEngine(
                sim_config,
                run_config=MonteCarloConfig(iterations=2000, seed=7, parallel=True),
            )
            results = engine.run()
            print(results.summary())

    Attributes:
        config: Garden inputs
        run_config: Run control
        crop_catalog: Crop reference table used for calendars
        parameters: Distributions sampled from
    """

    def __init__(
        self,
        config: SimulationConfig,
        crop_catalog: Optional[CropCatalog] = None,
        rng: Optional[np.random.Generator] = None,
        run_config: Optional[MonteCarloConfig] = None,
    ):
        """Initialize Monte Carlo engine.

        Args:
            config: Garden inputs
            crop_catalog: Crop reference table (default table if None)
            rng: Parent generator used when ``run_config.seed`` is None;
                chunk generators are spawned from it
            run_config: Run control (defaults if None); the engine keeps its
                own copy, so the caller's object is never modified

        Raises:
            PortfolioError: If the portfolio is missing or malformed.
        """
        self.config = config
        self.run_config = replace(run_config) if run_config is not None else MonteCarloConfig()
        self.crop_catalog = resolve_catalog(crop_catalog)
        self._rng = rng

        if self.run_config.n_workers is None and self.run_config.parallel:
            self.run_config = replace(self.run_config, n_workers=min(os.cpu_count() or 4, 8))

        self.parameters = generate_simulation_parameters(
            portfolio=config.portfolio,
            base_investment=config.base_investment,
            portfolio_multiplier=config.portfolio_multiplier,
            location=config.location,
            summer=config.selected_summer,
            winter=config.selected_winter,
            weather_data=config.weather_data,
        )

    @property
    def uses_forecast(self) -> bool:
        """Whether weather samples are anchored to the supplied forecast."""
        weather = self.config.weather_data
        return weather is not None and weather.is_usable

    def _chunks(self, n_iterations: int) -> List[Tuple[int, int]]:
        size = self.run_config.chunk_size
        return [(i, min(i + size, n_iterations)) for i in range(0, n_iterations, size)]

    def _chunk_generators(self, n_chunks: int) -> List[np.random.Generator]:
        if self.run_config.seed is not None:
            children = np.random.SeedSequence(self.run_config.seed).spawn(n_chunks)
            return [np.random.default_rng(child) for child in children]
        if self._rng is not None:
            return self._rng.spawn(n_chunks)
        return [np.random.default_rng(child) for child in np.random.SeedSequence().spawn(n_chunks)]

    def _sample_weather(self, size: int, rng: np.random.Generator) -> List[WeatherSample]:
        if self.uses_forecast:
            return generate_weather_samples_from_forecast(
                size, self.config.weather_data, self.config.location, rng
            )
        return generate_weather_samples(
            size,
            self.config.location,
            self.config.selected_summer,
            self.config.selected_winter,
            rng,
        )

    def _run_chunk(
        self, start: int, end: int, rng: np.random.Generator, year: int
    ) -> Tuple[List[SimulationIteration], int]:
        """Simulate iterations ``[start, end)`` with a chunk-private generator."""
        size = end - start
        params = self.parameters

        weather = self._sample_weather(size, rng)
        harvest, bad_harvest = _draw(rng, params.harvest, size)
        investment, bad_investment = _draw(rng, params.investment, size)
        heat, bad_heat = _draw(rng, params.heat_yield, size)
        cool, bad_cool = _draw(rng, params.cool_yield, size)
        perennial, bad_perennial = _draw(rng, params.perennial_yield, size)
        replaced = bad_harvest + bad_investment + bad_heat + bad_cool + bad_perennial

        net = harvest - investment
        positive = investment > 0
        roi = np.zeros(size)
        np.divide(net, investment, out=roi, where=positive)
        roi *= 100

        portfolio = self.config.portfolio
        iterations = [
            SimulationIteration(
                harvest_value=float(harvest[i]),
                investment=float(investment[i]),
                net_return=float(net[i]),
                roi=float(roi[i]),
                heat_yield=float(heat[i]),
                cool_yield=float(cool[i]),
                perennial_yield=float(perennial[i]),
                weather=weather[i],
                calendar=generate_calendar_from_scenario(
                    portfolio, weather[i], self.config.location, self.crop_catalog, year
                ),
            )
            for i in range(size)
        ]
        return iterations, replaced

    @staticmethod
    def _stop_requested(
        cancel_event: Optional[threading.Event], deadline: Optional[float]
    ) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Cancellation requested, stopping Monte Carlo run")
            return True
        if deadline is not None and time.time() >= deadline:
            logger.warning("Monte Carlo time budget exhausted, returning partial results")
            return True
        return False

    def run(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> MonteCarloResults:
        """Execute the Monte Carlo simulation.

        Args:
            progress_callback: Optional callback invoked with
                ``(completed, total, elapsed_seconds)`` after each chunk.
            cancel_event: Optional :class:`threading.Event`. When set, the
                engine stops after the current chunk and returns the
                completed iterations flagged as cancelled.

        Returns:
            MonteCarloResults with one record per completed iteration
        """
        start_time = time.time()
        n_iterations = self.run_config.iterations
        chunks = self._chunks(n_iterations)
        generators = self._chunk_generators(len(chunks))
        year = self.config.calendar_year or date.today().year
        deadline = (
            start_time + self.run_config.timeout_seconds
            if self.run_config.timeout_seconds is not None
            else None
        )

        if self.uses_forecast:
            logger.info("Sampling weather from forecast data")
        else:
            logger.info(
                "No usable forecast, sampling synthetic weather (%s summer, %s winter)",
                self.config.selected_summer.value,
                self.config.selected_winter.value,
            )

        if self.run_config.parallel and len(chunks) > 1:
            chunk_results, cancelled = self._run_parallel(
                chunks, generators, year, progress_callback, cancel_event, deadline
            )
        else:
            chunk_results, cancelled = self._run_sequential(
                chunks, generators, year, progress_callback, cancel_event, deadline
            )

        iterations: List[SimulationIteration] = []
        replaced = 0
        for index in sorted(chunk_results):
            chunk_iterations, chunk_replaced = chunk_results[index]
            iterations.extend(chunk_iterations)
            replaced += chunk_replaced

        if replaced:
            logger.warning("Replaced %d non-finite draws with their distribution mean", replaced)

        sources: Dict[str, int] = {}
        for it in iterations:
            sources[it.weather.data_source] = sources.get(it.weather.data_source, 0) + 1

        execution_time = time.time() - start_time
        logger.info(
            "Simulated %d/%d iterations in %.2fs%s",
            len(iterations),
            n_iterations,
            execution_time,
            " (cancelled)" if cancelled else "",
        )
        return MonteCarloResults(
            iterations=iterations,
            parameters=self.parameters,
            execution_time=execution_time,
            config=self.run_config,
            cancelled=cancelled,
            replaced_draws=replaced,
            weather_sources=sources,
        )

    def _run_sequential(
        self,
        chunks: List[Tuple[int, int]],
        generators: List[np.random.Generator],
        year: int,
        progress_callback: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> Tuple[Dict[int, Tuple[List[SimulationIteration], int]], bool]:
        """Run chunks one after another."""
        n_iterations = self.run_config.iterations
        results: Dict[int, Tuple[List[SimulationIteration], int]] = {}
        cancelled = False
        completed = 0
        seq_start = time.time()

        with tqdm(
            total=n_iterations,
            desc="Simulating seasons",
            disable=not self.run_config.progress_bar,
        ) as pbar:
            for index, (start, end) in enumerate(chunks):
                if self._stop_requested(cancel_event, deadline):
                    cancelled = True
                    break
                results[index] = self._run_chunk(start, end, generators[index], year)
                completed += end - start
                pbar.update(end - start)
                if progress_callback is not None:
                    progress_callback(completed, n_iterations, time.time() - seq_start)

        return results, cancelled

    def _run_parallel(
        self,
        chunks: List[Tuple[int, int]],
        generators: List[np.random.Generator],
        year: int,
        progress_callback: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> Tuple[Dict[int, Tuple[List[SimulationIteration], int]], bool]:
        """Run chunks on a thread pool.

        On cancellation or timeout, queued chunks are dropped and the pool is
        shut down without waiting; chunks already running finish in their
        worker threads and their results are discarded.
        """
        n_iterations = self.run_config.iterations
        results: Dict[int, Tuple[List[SimulationIteration], int]] = {}
        cancelled = False
        completed = 0
        par_start = time.time()
        remaining = None if deadline is None else max(0.0, deadline - par_start)

        executor = ThreadPoolExecutor(max_workers=self.run_config.n_workers)
        with tqdm(
            total=n_iterations,
            desc="Simulating seasons",
            disable=not self.run_config.progress_bar,
        ) as pbar:
            futures = {
                executor.submit(self._run_chunk, start, end, generators[index], year): index
                for index, (start, end) in enumerate(chunks)
            }
            try:
                for future in as_completed(futures, timeout=remaining):
                    index = futures[future]
                    results[index] = future.result()
                    start, end = chunks[index]
                    completed += end - start
                    pbar.update(end - start)
                    if progress_callback is not None:
                        progress_callback(completed, n_iterations, time.time() - par_start)
                    if completed < n_iterations and self._stop_requested(cancel_event, deadline):
                        cancelled = True
                        break
            except FuturesTimeoutError:
                logger.warning("Monte Carlo time budget exhausted, returning partial results")
                cancelled = True
            finally:
                executor.shutdown(wait=not cancelled, cancel_futures=True)

        return results, cancelled


def run_monte_carlo_simulation(
    config: SimulationConfig,
    iterations: int,
    rng: Optional[np.random.Generator] = None,
    crop_catalog: Optional[CropCatalog] = None,
) -> List[SimulationIteration]:
    """Run ``iterations`` sequential iterations and return the records.

    Args:
        config: Garden inputs.
        iterations: Number of iterations.
        rng: Generator to spawn chunk generators from (fresh entropy if None).
        crop_catalog: Crop reference table (default table if None).

    Returns:
        Exactly ``iterations`` records.
    """
    engine = MonteCarloEngine(
        config,
        crop_catalog=crop_catalog,
        rng=rng,
        run_config=MonteCarloConfig(iterations=iterations),
    )
    return engine.run().iterations
