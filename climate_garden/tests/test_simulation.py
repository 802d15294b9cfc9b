"""Tests for the end-to-end pipeline and the command line tool."""

from datetime import datetime, timezone
import json
import logging

import pytest
import yaml

from climate_garden.__main__ import main
from climate_garden.config import Config, PortfolioError, SimulationConfig
from climate_garden.simulation import run_complete_simulation

STAMP = datetime(2025, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def package_logger():
    """Restore the package logger after the CLI reconfigures it."""
    logger = logging.getLogger("climate_garden")
    saved = (logger.level, list(logger.handlers), logger.disabled)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.disabled = saved[2]


class TestRunCompleteSimulation:
    """Test the single-call pipeline."""

    def test_seeded_runs_identical(self, sim_config):
        """Test a seeded run reproduces the same output."""
        first = run_complete_simulation(sim_config, iterations=80, seed=11, generated_at=STAMP)
        second = run_complete_simulation(sim_config, iterations=80, seed=11, generated_at=STAMP)
        assert first.to_dict() == second.to_dict()

    def test_result_shape(self, sim_config):
        """Test statistics, histograms and calendar are populated."""
        results = run_complete_simulation(sim_config, iterations=60, seed=2)
        assert results.statistics.valid_count == 60
        assert sum(b.count for b in results.return_histogram) == 60
        assert len(results.roi_histogram) == 25
        assert results.calendar.total_scenarios == 60
        assert results.calendar.planting_recommendations
        assert not results.cancelled
        assert len(results.to_dataframe()) == 60
        assert "Garden Plan Simulation Summary" in results.summary()

    def test_no_timestamp_without_forecast(self, sim_config):
        """Test the forecast timestamp is omitted for scenario-only runs."""
        data = run_complete_simulation(sim_config, iterations=20, seed=3).to_dict()
        assert data["weather_enhanced"] is False
        assert "weather_timestamp" not in data

    def test_forecast_enhanced(self, sim_config, hot_forecast):
        """Test a forecast run reports its timestamp and weather context."""
        config = sim_config.model_copy(update={"weather_data": hot_forecast})
        results = run_complete_simulation(config, iterations=20, seed=3)
        data = results.to_dict()
        assert data["weather_enhanced"] is True
        assert data["weather_timestamp"] == "2025-05-01T06:00:00+00:00"
        assert results.weather_risk_data.real_weather is not None

    def test_config_run_section(self, portfolio):
        """Test a full Config supplies iterations and histogram bins."""
        config = Config(
            simulation={"portfolio": portfolio, "calendar_year": 2025},
            run={"iterations": 30, "seed": 4, "histogram_bins": 10},
        )
        results = run_complete_simulation(config)
        assert results.statistics.valid_count == 30
        assert len(results.return_histogram) == 10

    def test_missing_portfolio(self):
        """Test a plan without a portfolio raises PortfolioError."""
        with pytest.raises(PortfolioError):
            run_complete_simulation(SimulationConfig(), iterations=10)


class TestCommandLine:
    """Test ``python -m climate_garden``."""

    def _write(self, tmp_path, simulation):
        path = tmp_path / "garden.yaml"
        data = {
            "simulation": simulation,
            "run": {"iterations": 40},
            "logging": {"console_output": False, "level": "WARNING"},
        }
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    def test_run_with_output(self, tmp_path, portfolio, package_logger, capsys):
        """Test a run prints a summary and writes JSON results."""
        config_path = self._write(tmp_path, {"portfolio": portfolio, "calendar_year": 2025})
        output = tmp_path / "out" / "results.json"
        code = main(["--config", str(config_path), "--seed", "5", "--output", str(output)])
        assert code == 0
        assert "Garden Plan Simulation Summary" in capsys.readouterr().out
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["statistics"]["valid_count"] == 40
        assert len(data["iterations"]) == 40

    def test_missing_portfolio_exit_code(self, tmp_path, package_logger, capsys):
        """Test a configuration without a portfolio exits with code 2."""
        config_path = self._write(tmp_path, {"base_investment": 300})
        assert main(["--config", str(config_path)]) == 2
        assert "simulation.portfolio" in capsys.readouterr().err

    def test_strategy_fills_portfolio(self, tmp_path, package_logger):
        """Test a preset strategy supplies a missing portfolio."""
        config_path = self._write(tmp_path, {"calendar_year": 2025})
        code = main(["--config", str(config_path), "--strategy", "hedge", "--iterations", "15"])
        assert code == 0
