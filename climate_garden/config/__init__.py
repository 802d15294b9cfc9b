"""Configuration management using Pydantic v2 models.

This package provides the configuration classes for the climate garden
simulation. It uses Pydantic models for validation, type safety, and
automatic serialization/deserialization, plus the enumerated scenario
labels and every lookup table keyed by them.

Sub-modules:
    constants: Scenario- and category-keyed baseline tables.
    core: Master Config class and logging setup.
    exceptions: ConfigurationError and PortfolioError.
    location: Garden site descriptors.
    reporting: Logging configuration.
    scenarios: Summer/winter scenario and crop category enums.
    simulation: Garden scenario inputs and Monte Carlo run control.
    weather: Real-time forecast data model.

Examples:
    Quick start with defaults::

        from climate_garden import Config

        config = Config(simulation={"portfolio": {"heat_specialists": 50, "cool_season": 50}})

    Loading from file::

        config = Config.from_yaml(Path("garden.yaml"))
"""

from .core import Config, configure_logging
from .exceptions import ConfigurationError, PortfolioError
from .location import LocationConfig
from .reporting import LoggingConfig
from .scenarios import (
    CropCategory,
    SummerScenario,
    WinterScenario,
    parse_summer,
    parse_winter,
)
from .simulation import RunConfig, SimulationConfig
from .weather import CurrentConditions, DailyForecast, DailyTemperature, WeatherForecast

__all__ = [
    # Core
    "Config",
    "configure_logging",
    # Errors
    "ConfigurationError",
    "PortfolioError",
    # Inputs
    "LocationConfig",
    "SimulationConfig",
    "RunConfig",
    "LoggingConfig",
    # Scenarios
    "CropCategory",
    "SummerScenario",
    "WinterScenario",
    "parse_summer",
    "parse_winter",
    # Weather
    "CurrentConditions",
    "DailyForecast",
    "DailyTemperature",
    "WeatherForecast",
]
