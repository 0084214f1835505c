"""Configuration loading."""

from jirakit.config.loader import (
    expand_env_vars,
    get_config_value,
    load_config,
    validate_config,
)
from jirakit.config.settings import TrackerSettings, settings_from_config

__all__ = [
    "expand_env_vars",
    "get_config_value",
    "load_config",
    "validate_config",
    "TrackerSettings",
    "settings_from_config",
]
