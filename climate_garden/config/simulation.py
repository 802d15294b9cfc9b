"""Garden scenario and run-control configuration.

Contains the configuration classes describing *what* is simulated (crop
portfolio, budget, location, climate scenario, optional forecast) and *how*
the Monte Carlo run executes (iterations, seed, threading, time budget).
"""

import logging
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .location import LocationConfig
from .scenarios import SummerScenario, WinterScenario
from .weather import WeatherForecast

logger = logging.getLogger(__name__)


class SimulationConfig(BaseModel):
    """Inputs of one garden simulation.

    The portfolio is deliberately optional at the model level: a missing
    portfolio is reported by the engine as a
    :class:`~climate_garden.config.exceptions.PortfolioError` when the run
    starts, and by :meth:`Config.validate_or_raise` as a critical issue.

    Attributes:
        portfolio: Crop category key to allocation percentage (0-100).
        base_investment: Planned spend in dollars before the risk multiplier.
        portfolio_multiplier: Risk multiplier of the chosen portfolio
            strategy (conservative 0.85, hedge 1.0, aggressive 1.15).
        selected_summer: Summer severity scenario.
        selected_winter: Winter severity scenario.
        location: Garden site descriptors.
        weather_data: Optional pre-fetched forecast to anchor the run to.
        calendar_year: Year used for calendar dates (current year if None).

    Examples:
        Hedge portfolio in an extreme summer::

            sim = SimulationConfig(
                portfolio={"heat_specialists": 40, "cool_season": 35, "perennials": 25},
                base_investment=400,
                selected_summer="extreme",
            )
    """

    portfolio: Optional[Dict[str, float]] = Field(
        default=None, description="Crop category allocation percentages"
    )
    base_investment: float = Field(default=400.0, ge=0, description="Planned spend ($)")
    portfolio_multiplier: float = Field(
        default=1.0, gt=0, le=5, description="Portfolio risk multiplier on investment"
    )
    selected_summer: SummerScenario = Field(default=SummerScenario.NORMAL)
    selected_winter: WinterScenario = Field(default=WinterScenario.MILD)
    location: LocationConfig = Field(default_factory=LocationConfig)
    weather_data: Optional[WeatherForecast] = Field(
        default=None, description="Pre-fetched forecast; synthetic weather when absent"
    )
    calendar_year: Optional[int] = Field(default=None, ge=1900, le=2200)

    @field_validator("location", mode="before")
    @classmethod
    def default_location(cls, v):
        """Treat an explicit ``None`` location as all defaults."""
        if v is None:
            logger.debug("No location supplied, using default location")
            return LocationConfig()
        return v


class RunConfig(BaseModel):
    """Monte Carlo run control.

    Mirrors :class:`~climate_garden.monte_carlo.MonteCarloConfig` so that run
    settings can live in the same YAML file as the garden inputs.
    """

    iterations: int = Field(default=1000, ge=1, description="Number of Monte Carlo iterations")
    seed: Optional[int] = Field(default=None, ge=0, description="Random seed")
    parallel: bool = Field(default=False, description="Run chunks on a thread pool")
    n_workers: Optional[int] = Field(default=None, ge=1, description="Thread pool size")
    chunk_size: int = Field(default=250, ge=1, description="Iterations per seeded chunk")
    progress_bar: bool = Field(default=False, description="Show a tqdm progress bar")
    timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Stop after this many seconds"
    )
    histogram_bins: int = Field(default=25, ge=1, description="Bins of return/ROI histograms")
