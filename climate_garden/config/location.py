"""Garden location configuration.

Contains the immutable climate descriptors of a garden site. Every field has
a documented default so partially filled location records coming from a
user form still produce a runnable simulation.
"""

from datetime import date
import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

_ZONE_PATTERN = re.compile(r"^\s*(\d{1,2})\s*([ab]?)\s*$", re.IGNORECASE)


class LocationConfig(BaseModel):
    """Climate descriptors of a garden site.

    Absent fields, and fields explicitly set to ``None``, fall back to their
    defaults. Each fallback is logged at DEBUG so a mis-calibrated run can be
    traced back to missing inputs.

    Attributes:
        garden_size: Planted area in square feet.
        heat_intensity: Heat index from 0 (cool summers) to 5 (desert).
        winter_severity: Winter index from 0 (frost free) to 5 (severe).
        avg_rainfall: Average annual rainfall in inches.
        heat_days: Days per year above 86°F.
        hardiness_zone: USDA hardiness zone such as ``"7b"``.
        last_frost_month: Month of the average last spring frost.
        last_frost_day: Day of month of the average last spring frost.
        forecast_reference: Optional identifier of the forecast location.

    Examples:
        Hot, dry site::

            location = LocationConfig(heat_intensity=5, avg_rainfall=12)

        Partial input from a form::

            location = LocationConfig(**{"garden_size": 200, "heat_days": None})
    """

    model_config = ConfigDict(frozen=True)

    garden_size: float = Field(default=100.0, gt=0, description="Garden area in sq ft")
    heat_intensity: float = Field(default=3.0, ge=0, le=5, description="Heat intensity index")
    winter_severity: float = Field(default=3.0, ge=0, le=5, description="Winter severity index")
    avg_rainfall: float = Field(default=40.0, gt=0, description="Average annual rainfall (in)")
    heat_days: float = Field(default=100.0, ge=0, le=366, description="Days above 86F per year")
    hardiness_zone: str = Field(default="7b", description="USDA hardiness zone")
    last_frost_month: int = Field(default=4, ge=1, le=12, description="Last frost month")
    last_frost_day: int = Field(default=15, ge=1, le=31, description="Last frost day of month")
    forecast_reference: Optional[str] = Field(
        default=None, description="Identifier of the real-time forecast location"
    )

    @model_validator(mode="before")
    @classmethod
    def drop_missing_fields(cls, data: Any) -> Any:
        """Remove ``None`` entries so the field defaults apply."""
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if value is None and key in cls.model_fields and key != "forecast_reference":
                logger.debug("Location field '%s' missing, using default", key)
                continue
            cleaned[key] = value
        for name in cls.model_fields:
            if name not in data and name != "forecast_reference":
                logger.debug(
                    "Location field '%s' not supplied, using default %r",
                    name,
                    cls.model_fields[name].default,
                )
        return cleaned

    @field_validator("hardiness_zone")
    @classmethod
    def validate_zone(cls, v: str) -> str:
        """Validate USDA zone format.

        Raises:
            ValueError: If the zone is not of the form ``"7"`` or ``"7b"``
                with a number between 1 and 13.
        """
        match = _ZONE_PATTERN.match(v)
        if not match or not 1 <= int(match.group(1)) <= 13:
            raise ValueError(f"Invalid hardiness zone '{v}'. Expected e.g. '7b' (zones 1-13)")
        return f"{int(match.group(1))}{match.group(2).lower()}"

    @model_validator(mode="after")
    def validate_frost_date(self):
        """Ensure the last-frost month/day pair is a real calendar date."""
        try:
            date(2000, self.last_frost_month, self.last_frost_day)
        except ValueError as e:
            raise ValueError(
                f"Invalid last frost date {self.last_frost_month}/{self.last_frost_day}: {e}"
            ) from e
        return self

    @property
    def zone_number(self) -> int:
        """Numeric part of the hardiness zone."""
        return parse_zone_number(self.hardiness_zone)

    @property
    def size_multiplier(self) -> float:
        """Garden area relative to the 100 sq ft reference garden."""
        return self.garden_size / 100.0

    def last_frost_date(self, year: int) -> date:
        """Average last frost date in ``year``.

        February 29 falls back to February 28 in non-leap years.
        """
        try:
            return date(year, self.last_frost_month, self.last_frost_day)
        except ValueError:
            return date(year, self.last_frost_month, 28)


def parse_zone_number(zone: str) -> int:
    """Numeric part of a USDA zone label such as ``"10a"``.

    Raises:
        ValueError: If the label is not a valid zone.
    """
    match = _ZONE_PATTERN.match(zone)
    if not match:
        raise ValueError(f"Invalid hardiness zone '{zone}'")
    return int(match.group(1))
