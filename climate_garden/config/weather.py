"""Real-time weather forecast data model.

The engine never fetches forecasts itself. Callers resolve a forecast
beforehand and hand it over as a :class:`WeatherForecast`; the simulation
then anchors its weather samples and harvest parameters to it.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DailyTemperature(BaseModel):
    """Daily high/low temperature in degrees Fahrenheit."""

    model_config = ConfigDict(frozen=True)

    high: float
    low: float

    @model_validator(mode="after")
    def validate_range(self):
        """High must not be below low."""
        if self.high < self.low:
            raise ValueError(f"Daily high {self.high} is below daily low {self.low}")
        return self


class DailyForecast(BaseModel):
    """One forecast day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    temperature: DailyTemperature
    precipitation: float = Field(default=0.0, ge=0, description="Precipitation (in)")
    growing_degree_days: float = Field(default=0.0, ge=0, description="GDD for the day")


class CurrentConditions(BaseModel):
    """Snapshot of current observed conditions."""

    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(default=None, description="Current temperature (F)")


class WeatherForecast(BaseModel):
    """Resolved forecast handed to the simulation.

    Attributes:
        forecast: Ordered daily forecast records, nearest day first.
        current: Current conditions snapshot.
        timestamp: When the forecast was retrieved.
        gdd_year_to_date: Growing degree days accumulated so far this year.

    Examples:
        Minimal one-day forecast::

            forecast = WeatherForecast(
                forecast=[
                    DailyForecast(
                        date=date(2025, 5, 1),
                        temperature=DailyTemperature(high=82, low=58),
                        precipitation=0.2,
                        growing_degree_days=20,
                    )
                ],
                timestamp=datetime(2025, 5, 1, 6, 0, tzinfo=timezone.utc),
            )
    """

    model_config = ConfigDict(frozen=True)

    forecast: List[DailyForecast] = Field(default_factory=list)
    current: CurrentConditions = Field(default_factory=CurrentConditions)
    timestamp: Optional[dt.datetime] = Field(default=None, description="Retrieval time")
    gdd_year_to_date: Optional[float] = Field(
        default=None, ge=0, description="Year-to-date growing degree days"
    )

    @property
    def is_usable(self) -> bool:
        """Whether the forecast has at least one day of data."""
        return len(self.forecast) > 0

    def week(self) -> List[DailyForecast]:
        """First seven forecast days."""
        return self.forecast[:7]
