"""Tests for the Monte Carlo engine."""

import math
import threading
import time

import pytest

from climate_garden.config import PortfolioError, RunConfig, SimulationConfig
from climate_garden.monte_carlo import (
    MonteCarloConfig,
    MonteCarloEngine,
    run_monte_carlo_simulation,
)


class TestMonteCarloConfig:
    """Test run-control validation."""

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"iterations": 0}, "iterations"),
            ({"chunk_size": 0}, "chunk_size"),
            ({"n_workers": 0}, "n_workers"),
            ({"timeout_seconds": 0}, "timeout_seconds"),
            ({"seed": -1}, "seed"),
        ],
    )
    def test_invalid_values(self, kwargs, match):
        """Test out-of-range settings are rejected."""
        with pytest.raises(ValueError, match=match):
            MonteCarloConfig(**kwargs)

    def test_from_run_config(self):
        """Test YAML run settings carry over with an iteration override."""
        run = RunConfig(iterations=300, seed=9, chunk_size=50)
        config = MonteCarloConfig.from_run_config(run, iterations=120)
        assert config.iterations == 120
        assert config.seed == 9
        assert config.chunk_size == 50


class TestMonteCarloEngine:
    """Test sampling, seeding and early stopping."""

    def test_exact_iteration_count(self, sim_config):
        """Test the run yields exactly the requested finite iterations."""
        engine = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=130, seed=1, chunk_size=50)
        )
        results = engine.run()
        assert results.completed == 130
        assert not results.cancelled
        for it in results.iterations:
            assert math.isfinite(it.harvest_value)
            assert math.isfinite(it.roi)
            assert it.net_return == pytest.approx(it.harvest_value - it.investment)
        assert results.weather_sources == {"synthetic": 130}

    def test_seeded_runs_repeat(self, sim_config):
        """Test the same seed reproduces the same draws."""
        first = MonteCarloEngine(sim_config, run_config=MonteCarloConfig(iterations=40, seed=5))
        second = MonteCarloEngine(sim_config, run_config=MonteCarloConfig(iterations=40, seed=5))
        assert first.run().iterations == second.run().iterations

    def test_parallel_matches_sequential(self, sim_config):
        """Test a seeded parallel run equals the sequential run."""
        sequential = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=90, seed=3, chunk_size=20)
        ).run()
        parallel = MonteCarloEngine(
            sim_config,
            run_config=MonteCarloConfig(
                iterations=90, seed=3, chunk_size=20, parallel=True, n_workers=3
            ),
        ).run()
        assert parallel.iterations == sequential.iterations

    def test_caller_run_config_untouched(self, sim_config):
        """Test resolving the worker count does not modify the caller's config."""
        run = MonteCarloConfig(iterations=10, parallel=True)
        engine = MonteCarloEngine(sim_config, run_config=run)
        assert run.n_workers is None
        assert engine.run_config.n_workers >= 1
        assert engine.run_config is not run

    def test_parallel_timeout_returns_promptly(self, sim_config, monkeypatch):
        """Test a parallel run stops waiting on running chunks once the budget expires."""
        release = threading.Event()
        engine = MonteCarloEngine(
            sim_config,
            run_config=MonteCarloConfig(
                iterations=40,
                seed=1,
                chunk_size=10,
                parallel=True,
                n_workers=2,
                timeout_seconds=0.5,
            ),
        )
        run_chunk = engine._run_chunk

        def stalled_chunk(start, end, rng, year):
            if start > 0:
                release.wait(10)
            return run_chunk(start, end, rng, year)

        monkeypatch.setattr(engine, "_run_chunk", stalled_chunk)
        started = time.time()
        try:
            results = engine.run()
        finally:
            release.set()
        assert time.time() - started < 5
        assert results.cancelled
        assert results.completed in (0, 10)

    def test_parent_generator_is_used(self, sim_config, rng):
        """Test an unseeded run spawns chunk generators from the supplied rng."""
        engine = MonteCarloEngine(
            sim_config, rng=rng, run_config=MonteCarloConfig(iterations=10)
        )
        assert engine.run().completed == 10

    def test_cancel_before_start(self, sim_config):
        """Test a pre-set cancel event returns no iterations."""
        event = threading.Event()
        event.set()
        engine = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=100, seed=1, chunk_size=10)
        )
        results = engine.run(cancel_event=event)
        assert results.cancelled
        assert results.completed == 0
        assert "cancelled" in results.summary()

    def test_cancel_midway_keeps_whole_chunks(self, sim_config):
        """Test cancelling from the progress callback stops after that chunk."""
        event = threading.Event()

        def stop_after_first(completed, total, elapsed):
            event.set()

        engine = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=100, seed=1, chunk_size=25)
        )
        results = engine.run(progress_callback=stop_after_first, cancel_event=event)
        assert results.cancelled
        assert results.completed == 25

    def test_progress_callback(self, sim_config):
        """Test progress is reported after every chunk."""
        calls = []
        engine = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=60, seed=2, chunk_size=25)
        )
        engine.run(progress_callback=lambda done, total, elapsed: calls.append((done, total)))
        assert calls == [(25, 60), (50, 60), (60, 60)]

    def test_forecast_sampling(self, sim_config, hot_forecast):
        """Test a usable forecast anchors the weather samples."""
        config = sim_config.model_copy(update={"weather_data": hot_forecast})
        engine = MonteCarloEngine(config, run_config=MonteCarloConfig(iterations=20, seed=4))
        assert engine.uses_forecast
        results = engine.run()
        assert results.weather_sources == {"forecast": 20}
        assert results.parameters.weather_adjustments is not None

    def test_zero_investment_roi(self, portfolio):
        """Test ROI is zero when the investment is not positive."""
        config = SimulationConfig(portfolio=portfolio, base_investment=0, calendar_year=2025)
        results = MonteCarloEngine(
            config, run_config=MonteCarloConfig(iterations=20, seed=8)
        ).run()
        assert all(it.roi == 0 for it in results.iterations if it.investment <= 0)

    def test_to_dataframe(self, sim_config):
        """Test iterations flatten to one row each with weather columns."""
        results = MonteCarloEngine(
            sim_config, run_config=MonteCarloConfig(iterations=15, seed=6)
        ).run()
        df = results.to_dataframe()
        assert len(df) == 15
        assert {"net_return", "roi", "stress_days", "data_source"} <= set(df.columns)

    def test_missing_portfolio(self):
        """Test the engine refuses a plan without a portfolio."""
        with pytest.raises(PortfolioError):
            MonteCarloEngine(SimulationConfig())


class TestRunMonteCarloSimulation:
    """Test the functional entry point."""

    def test_length(self, sim_config, rng):
        """Test the requested number of records is returned."""
        iterations = run_monte_carlo_simulation(sim_config, 33, rng=rng)
        assert len(iterations) == 33
        assert iterations[0].calendar.adjusted_last_frost.year == 2025
