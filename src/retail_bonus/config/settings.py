"""
Configuration loading for the bonus engine.

This module provides utilities for loading configuration from files and
environment variables, with defaults as the last resort.
"""

import logging
import os
from pathlib import Path

from retail_bonus.shared.exceptions import ConfigurationError

from .models import DEFAULT_BONUS_CONFIG, BonusConfig

logger = logging.getLogger(__name__)

ENV_VARS = {
    "RETAIL_BONUS_SEARCH_BONUS_LIMIT": ("search", "bonus_limit"),
    "RETAIL_BONUS_SEARCH_QUALIFYING_LIMIT": ("search", "qualifying_limit"),
    "RETAIL_BONUS_SEARCH_OFFSET": ("search", "offset"),
    "RETAIL_BONUS_LOG_LEVEL": ("logging", "level"),
}


def load_config(
    config_path: str | Path | None = None, config_name: str = "bonus_config.json"
) -> BonusConfig:
    """
    Load configuration from file with path resolution.

    Args:
        config_path: Explicit path to config file or directory containing config
        config_name: Name of config file (default: "bonus_config.json")

    Returns:
        BonusConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If no configuration file is found
        ConfigurationError: If configuration is invalid
    """
    if config_path is None:
        search_paths = [
            Path.cwd() / config_name,
            Path.cwd() / "config" / config_name,
        ]

        for path in search_paths:
            if path.exists():
                config_path = path
                break
        else:
            raise FileNotFoundError(
                f"Configuration file '{config_name}' not found in any of: "
                f"{[str(p) for p in search_paths]}"
            )

    config_path = Path(config_path)

    # If path is a directory, look for config file inside it
    if config_path.is_dir():
        config_path = config_path / config_name

    return BonusConfig.from_file(config_path)


def get_config_from_env() -> BonusConfig | None:
    """
    Try to load configuration from environment variables.

    Returns:
        BonusConfig if environment variables are set, None otherwise

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    config_file_env = os.getenv("RETAIL_BONUS_CONFIG_FILE")
    if config_file_env:
        return load_config(config_file_env)

    env_values = {key: os.getenv(key) for key in ENV_VARS}
    if not any(env_values.values()):
        return None

    config_data: dict[str, dict[str, str]] = {}
    for key, value in env_values.items():
        if value is None:
            continue
        section, field = ENV_VARS[key]
        config_data.setdefault(section, {})[field] = value

    return BonusConfig.from_dict(config_data)


def load_config_with_fallback(config_path: str | Path | None = None) -> BonusConfig:
    """
    Load configuration with fallback to environment variables and defaults.

    Priority order:
    1. Explicit config file path
    2. Environment variable RETAIL_BONUS_CONFIG_FILE
    3. Individual RETAIL_BONUS_* environment variables
    4. Default locations (bonus_config.json, config/bonus_config.json)
    5. Built-in defaults

    An explicit path that cannot be loaded is an error; every other source
    falls through to the next.
    """
    if config_path:
        return load_config(config_path)

    try:
        env_config = get_config_from_env()
        if env_config:
            return env_config
    except (ConfigurationError, FileNotFoundError) as e:
        logger.warning("Ignoring environment configuration: %s", e)

    try:
        return load_config()
    except FileNotFoundError:
        pass

    logger.debug("No configuration found, using defaults")
    return DEFAULT_BONUS_CONFIG.model_copy(deep=True)
