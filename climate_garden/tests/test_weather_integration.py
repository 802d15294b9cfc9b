"""Tests for the forecast integration seam."""

from datetime import datetime, timezone

import numpy as np
import pytest

from climate_garden.config import LocationConfig, WeatherForecast
from climate_garden.weather_integration import (
    WeatherMetrics,
    calculate_confidence_level,
    calculate_weather_adjustments,
    calculate_weather_score,
    extract_weather_metrics,
    generate_weather_risk_analysis,
    generate_weather_samples_from_forecast,
)
from climate_garden.weather_sampler import FORECAST


def _metrics(**overrides):
    values = dict(
        current_temp=70.0,
        min_temp=50.0,
        max_temp=80.0,
        gdd_year_to_date=300.0,
        weekly_gdd=100.0,
        precipitation=1.5,
        heat_stress_days=1,
        frost_risk=False,
    )
    values.update(overrides)
    return WeatherMetrics(**values)


class TestExtractWeatherMetrics:
    """Test reduction of a forecast to weekly metrics."""

    def test_hot_week(self, hot_forecast):
        """Test heat-stress days, precipitation and defaults."""
        metrics = extract_weather_metrics(hot_forecast)
        assert metrics.heat_stress_days == 7
        assert metrics.frost_risk is False
        assert metrics.precipitation == pytest.approx(1.4)
        assert metrics.weekly_gdd == pytest.approx(105)
        assert metrics.current_temp == 70
        assert metrics.gdd_year_to_date == 500

    def test_only_first_week_used(self, forecast_factory):
        """Test days beyond the first seven are ignored."""
        forecast = forecast_factory(highs=[80] * 7 + [100] * 3, lows=[60] * 7 + [20] * 3)
        metrics = extract_weather_metrics(forecast)
        assert metrics.heat_stress_days == 0
        assert metrics.frost_risk is False

    def test_threshold_is_strict(self, forecast_factory):
        """Test a 90F high is not a heat-stress day and a 35F low is not frost."""
        metrics = extract_weather_metrics(forecast_factory(highs=[90], lows=[35]))
        assert metrics.heat_stress_days == 0
        assert metrics.frost_risk is False

    def test_empty_forecast(self):
        """Test an empty forecast is rejected."""
        with pytest.raises(ValueError):
            extract_weather_metrics(WeatherForecast())


class TestWeatherAdjustments:
    """Test the documented multiplicative adjustment."""

    def test_neutral_metrics(self):
        """Test metrics that trigger no rule leave multipliers at 1."""
        adjustments = calculate_weather_adjustments(_metrics(), LocationConfig())
        assert adjustments.yield_multiplier == pytest.approx(1.0)
        assert adjustments.heat_crop_multiplier == pytest.approx(1.0)
        assert adjustments.cool_crop_multiplier == pytest.approx(1.0)
        assert adjustments.variance_multiplier == pytest.approx(1.0)

    def test_heat_wave(self, hot_forecast):
        """Test a hot week with high year-to-date GDD."""
        adjustments = calculate_weather_adjustments(
            extract_weather_metrics(hot_forecast), LocationConfig()
        )
        heat = 0.85 * 1.15
        cool = 0.7
        assert adjustments.heat_crop_multiplier == pytest.approx(heat)
        assert adjustments.cool_crop_multiplier == pytest.approx(cool)
        assert adjustments.variance_multiplier == pytest.approx(1.2)
        assert adjustments.yield_multiplier == pytest.approx((heat + cool) / 2)

    def test_frost_and_drought(self):
        """Test frost risk combined with a dry, cold-start week."""
        metrics = _metrics(
            heat_stress_days=0, frost_risk=True, precipitation=0.1, gdd_year_to_date=100
        )
        adjustments = calculate_weather_adjustments(metrics, LocationConfig())
        heat = 0.3 * 0.9
        cool = 1.1 * 0.8 * 1.05
        assert adjustments.heat_crop_multiplier == pytest.approx(heat)
        assert adjustments.cool_crop_multiplier == pytest.approx(cool)
        assert adjustments.variance_multiplier == pytest.approx(1.5 * 1.4)
        assert adjustments.yield_multiplier == pytest.approx(0.85 * (heat + cool) / 2)

    def test_wet_week(self):
        """Test excessive precipitation lowers yield and raises variance."""
        adjustments = calculate_weather_adjustments(_metrics(precipitation=5.0))
        assert adjustments.yield_multiplier == pytest.approx(0.9)
        assert adjustments.variance_multiplier == pytest.approx(1.3)

    def test_clamps(self):
        """Test multipliers stay within their documented bounds."""
        metrics = _metrics(heat_stress_days=7, frost_risk=True, precipitation=0.0)
        adjustments = calculate_weather_adjustments(metrics)
        assert 0.2 <= adjustments.yield_multiplier <= 1.8
        assert 0.1 <= adjustments.heat_crop_multiplier <= 2.0
        assert 0.1 <= adjustments.cool_crop_multiplier <= 2.0
        assert 0.5 <= adjustments.variance_multiplier <= 3.0

    def test_confidence_and_score_bounds(self):
        """Test confidence and score ranges."""
        harsh = _metrics(current_temp=100, heat_stress_days=7, frost_risk=True, precipitation=0)
        assert 0.3 <= calculate_confidence_level(harsh) <= 0.95
        assert calculate_weather_score(harsh) == 0
        assert calculate_confidence_level(_metrics()) == pytest.approx(0.8)
        assert calculate_weather_score(_metrics()) == pytest.approx(80)


class TestForecastSamples:
    """Test forecast-anchored weather samples."""

    def test_samples_anchor_to_forecast(self, hot_forecast, location, rng):
        """Test stress days jitter around twice the weekly count."""
        samples = generate_weather_samples_from_forecast(300, hot_forecast, location, rng)
        assert len(samples) == 300
        stress = np.array([s.stress_days for s in samples])
        assert stress.min() >= 12
        assert stress.max() <= 16
        assert all(s.data_source == FORECAST for s in samples)
        assert all(s.annual_rainfall >= 10 for s in samples)
        assert all(s.growing_degree_days is not None for s in samples)

    def test_frost_anchors_freeze_events(self, frosty_forecast, location, rng):
        """Test frost risk anchors freeze events at five."""
        samples = generate_weather_samples_from_forecast(300, frosty_forecast, location, rng)
        freeze = np.array([s.freeze_events for s in samples])
        assert freeze.min() >= 4
        assert freeze.max() <= 6


class TestRiskAnalysis:
    """Test plain-language forecast risk analysis."""

    def test_no_forecast(self):
        """Test a missing forecast gives an unknown risk level."""
        analysis = generate_weather_risk_analysis(None)
        assert analysis.risk_level == "unknown"
        assert analysis.recommendations

    def test_empty_forecast(self):
        """Test an empty forecast gives an unknown risk level."""
        assert generate_weather_risk_analysis(WeatherForecast()).risk_level == "unknown"

    def test_heat_wave_is_high_risk(self, hot_forecast):
        """Test an extended heat wave is high risk."""
        now = datetime(2025, 5, 1, tzinfo=timezone.utc)
        analysis = generate_weather_risk_analysis(hot_forecast, now=now)
        assert analysis.risk_level == "high"
        assert "Extended heat wave conditions" in analysis.factors
        assert analysis.timestamp == now

    def test_frost_is_high_risk(self, frosty_forecast):
        """Test frost in the coming week is high risk."""
        analysis = generate_weather_risk_analysis(frosty_forecast)
        assert analysis.risk_level == "high"
        assert "Frost risk in coming week" in analysis.factors

    def test_mild_week_is_low_risk(self, forecast_factory):
        """Test a mild, moderately wet week is low risk."""
        forecast = forecast_factory(highs=[75] * 7, lows=[55] * 7, precipitation=0.2)
        assert generate_weather_risk_analysis(forecast).risk_level == "low"
