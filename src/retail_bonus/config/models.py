"""
Configuration models for the bonus-product allocation engine.

Configuration covers the ambient concerns around the engine (logging and the
parameters of the rule-based product searches performed by callers). It never
changes how bonus units are allocated.
"""

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from retail_bonus.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SearchConfig(BaseModel):
    """Defaults for rule-based bonus product searches."""

    bonus_limit: int = Field(
        50, gt=0, le=200, description="Page size when listing rule-based bonus products"
    )
    qualifying_limit: int = Field(
        200,
        gt=0,
        le=200,
        description="Page size when listing products qualifying for a rule-based promotion",
    )
    offset: int = Field(0, ge=0, description="Default search offset")


class LoggingConfig(BaseModel):
    """Logging settings for the engine and CLI."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING", description="Root log level"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalise_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v


class BonusConfig(BaseModel):
    """Main configuration model for the bonus engine."""

    search: SearchConfig = Field(
        default_factory=SearchConfig, description="Rule-based search defaults"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_dict(cls, data: dict) -> "BonusConfig":
        """Create a ``BonusConfig`` from a Python dictionary."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError("Configuration does not match schema", original_error=e)

    @classmethod
    def from_file(cls, file_path: str | Path) -> "BonusConfig":
        """
        Load configuration from a JSON file.

        Args:
            file_path: Path to the configuration JSON file

        Returns:
            BonusConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the JSON is invalid or doesn't match the schema
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with path.open("r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError("Invalid JSON", file_path=path, original_error=e)

        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data)

    def to_file(self, file_path: str | Path) -> None:
        """
        Save configuration to a JSON file.

        Args:
            file_path: Path where to save the configuration file
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w") as f:
            json.dump(self.model_dump(), f, indent=2)


DEFAULT_BONUS_CONFIG = BonusConfig()
"""Configuration used when nothing else is supplied."""
