"""Master configuration class composing all sub-configurations.

Contains the top-level ``Config`` class that aggregates the garden scenario,
run-control and logging sections into one object with YAML loading, saving,
dot-notation overrides and cross-field validation.
"""

import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Optional
import warnings

from pydantic import BaseModel, Field
import yaml

from .._warnings import ConfigurationWarning
from .exceptions import ConfigurationError
from .reporting import LoggingConfig
from .scenarios import CropCategory
from .simulation import RunConfig, SimulationConfig
from .utils import deep_merge

PACKAGE_LOGGER = "climate_garden"


class Config(BaseModel):
    """Complete configuration for a garden simulation run.

    All sections have defaults except the portfolio, which must be supplied
    before a run. ``Config.validate_or_raise()`` reports a missing portfolio as a
    critical issue.

    Examples:
        Minimal usage::

            config = Config(simulation={"portfolio": {"heat_specialists": 60, "cool_season": 40}})

        From a YAML file::

            config = Config.from_yaml(Path("garden.yaml"))

        Override specific parameters::

            hotter = config.override({"simulation.selected_summer": "extreme"})
    """

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Config object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict, base_config: Optional["Config"] = None) -> "Config":
        """Create config from dictionary, optionally overriding base config.

        Args:
            data: Dictionary with configuration parameters.
            base_config: Optional base configuration to override.

        Returns:
            Config object with validated parameters.
        """
        if base_config is None:
            return cls(**data)

        config_dict = base_config.model_dump()
        merged = deep_merge(config_dict, data)
        return cls(**merged)

    def override(self, overrides: Dict[str, Any]) -> "Config":
        """Create a new config with overridden parameters.

        Each path's value replaces the value at that path as a whole, so
        ``{"simulation.portfolio": {"cool_season": 100}}`` yields a portfolio
        with only ``cool_season``.

        Args:
            overrides: Dictionary mapping dot-notation paths to values.
                Example: ``{"simulation.base_investment": 600}``

        Returns:
            New Config object with overrides applied.

        Raises:
            ValueError: If a path references an unknown config section or field.
        """
        data = self.model_dump()
        for key, value in overrides.items():
            parts = key.split(".")
            self._validate_override_path(key, parts)
            current = data
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value

        return Config(**data)

    def _validate_override_path(self, key: str, parts: list) -> None:
        """Validate that a dot-notation path refers to valid config fields.

        Raises:
            ValueError: If any segment of the path is not a recognised field.
        """
        section = parts[0]
        fields = type(self).model_fields
        if section not in fields:
            valid = ", ".join(sorted(fields.keys()))
            raise ValueError(
                f"Invalid config path '{key}': '{section}' is not a valid "
                f"config section. Valid sections: {valid}"
            )

        if len(parts) >= 2:
            annotation = fields[section].annotation
            if (
                annotation is not None
                and hasattr(annotation, "model_fields")
                and parts[1] not in annotation.model_fields
            ):
                valid = ", ".join(sorted(annotation.model_fields.keys()))
                raise ValueError(
                    f"Invalid config path '{key}': '{parts[1]}' is not a valid "
                    f"field in '{section}'. Valid fields: {valid}"
                )

    def validate_completeness(self) -> List[str]:
        """Collect critical configuration issues.

        Returns:
            List of problems that would make a run meaningless. Empty when
            the configuration is runnable.
        """
        issues = []
        portfolio = self.simulation.portfolio
        if portfolio is None:
            issues.append("Missing required section: simulation.portfolio")
            return issues

        known = {c.value for c in CropCategory}
        for key, value in portfolio.items():
            if value is None or value < 0 or value > 100:
                issues.append(f"Allocation for '{key}' must be between 0 and 100, got {value}")
            elif key not in known:
                warnings.warn(
                    f"Unknown portfolio category '{key}' contributes nothing to the harvest",
                    ConfigurationWarning,
                    stacklevel=2,
                )

        if portfolio and all(v == 0 for v in portfolio.values() if v is not None):
            issues.append("Portfolio allocates 0% to every category")

        return issues

    def validate_or_raise(self) -> None:
        """Raise if the configuration has critical issues.

        Raises:
            ConfigurationError: Listing every issue found.
        """
        issues = self.validate_completeness()
        if issues:
            raise ConfigurationError(issues)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where to save the configuration.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.logging)


def configure_logging(settings: Optional[LoggingConfig] = None) -> logging.Logger:
    """Attach console and/or file handlers to the package logger.

    Args:
        settings: Logging settings; defaults when None.

    Returns:
        The configured ``climate_garden`` logger.
    """
    settings = settings or LoggingConfig()
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not settings.enabled:
        logger.disabled = True
        return logger

    logger.disabled = False
    logger.setLevel(getattr(logging, settings.level))
    logger.handlers.clear()

    formatter = logging.Formatter(settings.format)

    if settings.console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
