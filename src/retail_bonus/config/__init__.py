"""Configuration models and loaders for the bonus engine."""

from .models import DEFAULT_BONUS_CONFIG, BonusConfig, LoggingConfig, SearchConfig
from .settings import get_config_from_env, load_config, load_config_with_fallback

__all__ = [
    "BonusConfig",
    "SearchConfig",
    "LoggingConfig",
    "DEFAULT_BONUS_CONFIG",
    "load_config",
    "get_config_from_env",
    "load_config_with_fallback",
]
