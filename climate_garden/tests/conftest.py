"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest

from climate_garden.config import (
    CurrentConditions,
    DailyForecast,
    DailyTemperature,
    LocationConfig,
    SimulationConfig,
    WeatherForecast,
)
from climate_garden.weather_sampler import WeatherSample


def make_forecast(
    highs,
    lows,
    precipitation=0.2,
    gdd=15.0,
    start=date(2025, 5, 1),
    current_temperature=None,
    gdd_year_to_date=None,
):
    """Build a forecast with one day per (high, low) pair."""
    days = [
        DailyForecast(
            date=start + timedelta(days=i),
            temperature=DailyTemperature(high=high, low=low),
            precipitation=precipitation,
            growing_degree_days=gdd,
        )
        for i, (high, low) in enumerate(zip(highs, lows))
    ]
    return WeatherForecast(
        forecast=days,
        current=CurrentConditions(temperature=current_temperature),
        timestamp=datetime(2025, 5, 1, 6, 0, tzinfo=timezone.utc),
        gdd_year_to_date=gdd_year_to_date,
    )


@pytest.fixture
def location():
    """Default 100 sq ft location with an April 15 last frost."""
    return LocationConfig()


@pytest.fixture
def portfolio():
    """Portfolio across the three yielding categories."""
    return {"heat_specialists": 40, "cool_season": 35, "perennials": 25}


@pytest.fixture
def sim_config(portfolio):
    """Normal summer, mild winter simulation inputs with a fixed calendar year."""
    return SimulationConfig(portfolio=portfolio, base_investment=400, calendar_year=2025)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(12345)


@pytest.fixture
def forecast_factory():
    """Return the forecast builder."""
    return make_forecast


@pytest.fixture
def hot_forecast():
    """A week of 95F highs, no frost, 0.2 in of rain a day."""
    return make_forecast(highs=[95] * 7, lows=[70] * 7)


@pytest.fixture
def frosty_forecast():
    """A cool week with one frosty night."""
    return make_forecast(highs=[60] * 7, lows=[40, 40, 30, 40, 40, 40, 40], precipitation=0.3)


@pytest.fixture
def calm_weather():
    """Weather sample that triggers no shifts or penalties."""
    return WeatherSample(stress_days=10, freeze_events=5, annual_rainfall=40.0)


@pytest.fixture
def harsh_weather():
    """Weather sample with heavy heat stress, many freezes and a drought."""
    return WeatherSample(stress_days=40, freeze_events=20, annual_rainfall=18.0)
