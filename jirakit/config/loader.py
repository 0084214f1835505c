"""Configuration file loader and validator."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
import structlog

from jirakit.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

AUTH_TYPES = ("basic", "token")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in configuration values.

    Supports ${VAR_NAME} syntax.

    Args:
        value: Configuration value (can be dict, list, str, etc.)

    Returns:
        Value with environment variables expanded
    """
    if isinstance(value, str):
        for var_name in re.findall(r"\$\{([^}]+)\}", value):
            env_value = os.environ.get(var_name, "")
            if not env_value:
                logger.warning("environment_variable_not_set", var_name=var_name)
            value = value.replace(f"${{{var_name}}}", env_value)
        return value

    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]

    return value


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to configuration file (default: config.yaml)

    Returns:
        Configuration dictionary with environment variables expanded

    Raises:
        ConfigurationError: If configuration is invalid or file not found
    """
    if config_path is None:
        config_path = Path("config.yaml")

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not config:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    config = expand_env_vars(config)
    validate_config(config)

    logger.info("configuration_loaded", config_path=str(config_path))
    return config


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration structure and required fields.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if "jira" not in config or not isinstance(config["jira"], dict):
        raise ConfigurationError("Missing required configuration section: jira")

    jira_config = config["jira"]

    for field in ("site", "username"):
        if not jira_config.get(field):
            raise ConfigurationError(f"jira.{field} is required")

    auth_type = str(jira_config.get("auth_type", "basic")).lower()
    if auth_type not in AUTH_TYPES:
        raise ConfigurationError(f"jira.auth_type must be one of: {', '.join(AUTH_TYPES)}")

    if auth_type == "token" and not jira_config.get("token"):
        raise ConfigurationError("jira.token is required when auth_type is token")

    if auth_type == "basic" and not jira_config.get("password"):
        logger.warning("basic_auth_without_password")

    max_results = jira_config.get("max_results")
    if max_results is not None and (not isinstance(max_results, int) or max_results < 1):
        raise ConfigurationError("jira.max_results must be a positive integer")

    logger.debug("configuration_validated")


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Get a configuration value using dot notation.

    Example:
        >>> config = {"jira": {"site": "https://jira.example.com"}}
        >>> get_config_value(config, "jira.site")
        'https://jira.example.com'
    """
    value = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
