"""Tests for synthetic weather sampling."""

import numpy as np
import pytest

from climate_garden.config import LocationConfig
from climate_garden.weather_sampler import (
    SYNTHETIC,
    WeatherSample,
    generate_weather_samples,
    get_freeze_params,
    get_rainfall_params,
    get_stress_days_params,
)


class TestSamplingParameters:
    """Test Poisson and Normal parameters."""

    @pytest.mark.parametrize(
        "summer,expected", [("mild", 5), ("normal", 15), ("extreme", 35), ("catastrophic", 60)]
    )
    def test_stress_rate_at_reference_intensity(self, summer, expected):
        """Test baselines apply unscaled at heat intensity 3."""
        assert get_stress_days_params(summer, LocationConfig()) == pytest.approx(expected)

    def test_stress_rate_scales_with_intensity(self):
        """Test the stress rate scales linearly with heat intensity."""
        location = LocationConfig(heat_intensity=4.5)
        assert get_stress_days_params("extreme", location) == pytest.approx(52.5)

    @pytest.mark.parametrize(
        "winter,expected", [("traditional", 20), ("mild", 8), ("warm", 3), ("none", 0)]
    )
    def test_freeze_rate(self, winter, expected):
        """Test freeze baselines at winter severity 3."""
        assert get_freeze_params(winter) == pytest.approx(expected)

    def test_rainfall_params(self):
        """Test rainfall std is 20% of the location average."""
        mean, std = get_rainfall_params(LocationConfig(avg_rainfall=30))
        assert mean == 30
        assert std == pytest.approx(6)

    def test_unknown_scenario(self):
        """Test unknown scenario labels raise."""
        with pytest.raises(ValueError):
            get_stress_days_params("scorching")


class TestGenerateWeatherSamples:
    """Test synthetic weather sample generation."""

    def test_sample_count_and_types(self, location, rng):
        """Test exactly N samples of non-negative integer counts."""
        samples = generate_weather_samples(500, location, "normal", "mild", rng)
        assert len(samples) == 500
        assert all(isinstance(s, WeatherSample) for s in samples)
        assert all(isinstance(s.stress_days, int) and s.stress_days >= 0 for s in samples)
        assert all(isinstance(s.freeze_events, int) and s.freeze_events >= 0 for s in samples)
        assert all(s.data_source == SYNTHETIC for s in samples)

    def test_rainfall_floor(self, rng):
        """Test rainfall never drops below 10 inches."""
        samples = generate_weather_samples(2000, LocationConfig(avg_rainfall=11), rng=rng)
        rainfall = np.array([s.annual_rainfall for s in samples])
        assert rainfall.min() >= 10
        assert np.any(rainfall == 10)

    def test_no_winter_means_no_freezes(self, rng):
        """Test the 'none' winter scenario never produces freeze events."""
        samples = generate_weather_samples(200, winter="none", rng=rng)
        assert all(s.freeze_events == 0 for s in samples)

    def test_sample_means_track_rates(self, rng):
        """Test sample means are close to the Poisson rates."""
        samples = generate_weather_samples(5000, summer="extreme", winter="traditional", rng=rng)
        assert np.mean([s.stress_days for s in samples]) == pytest.approx(35, rel=0.05)
        assert np.mean([s.freeze_events for s in samples]) == pytest.approx(20, rel=0.05)

    def test_seeded_reproducibility(self):
        """Test equal seeds give equal samples."""
        first = generate_weather_samples(50, rng=np.random.default_rng(7))
        second = generate_weather_samples(50, rng=np.random.default_rng(7))
        assert first == second

    def test_zero_iterations(self, rng):
        """Test zero iterations gives an empty list."""
        assert generate_weather_samples(0, rng=rng) == []

    def test_negative_iterations(self, rng):
        """Test negative iteration counts are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            generate_weather_samples(-1, rng=rng)
