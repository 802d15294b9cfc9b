"""Version information for climate_garden."""

__version__ = "0.4.0"
