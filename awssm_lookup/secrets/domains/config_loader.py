"""Configuration loader for awssm-lookup."""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .models import CreateOptions, DEFAULT_CACHE_STALE

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AWSSM_LOOKUP_CONFIG"

# Top-level keys and the types their values must have
_TOP_LEVEL_KEYS = {
    "region": (str,),
    "instance_metadata": (bool,),
    "cache_stale": (int, float),
    "ignore_cache": (bool,),
    "retry_max_attempts": (int,),
    "create": (dict,),
}

CREATE_OPTION_TYPES = {
    "create_missing": (bool,),
    "password_length": (int,),
    "exclude_characters": (str,),
    "exclude_numbers": (bool,),
    "exclude_punctuation": (bool,),
    "exclude_uppercase": (bool,),
    "exclude_lowercase": (bool,),
    "include_space": (bool,),
    "require_each_included_type": (bool,),
    "name": (str,),
    "description": (str,),
}

# Per-call lookup options accepted alongside the create options
LOOKUP_OPTION_TYPES = {
    "version": (str,),
    "region": (str,),
    "cache_stale": (int, float),
    "ignore_cache": (bool,),
}


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "awssm-lookup" / "config.yml"


def _get_config_path() -> Optional[str]:
    """
    Get config file path.

    Priority order:
    1. AWSSM_LOOKUP_CONFIG environment variable
    2. Default location: ~/.config/awssm-lookup/config.yml

    Returns:
        Absolute path to config file, or None if no config file exists
    """
    # 1. Check environment override
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        config_path = Path(env_path).expanduser()
        if config_path.exists():
            logger.debug(f"Using config from {CONFIG_ENV_VAR}: {config_path}")
            return str(config_path)
        else:
            logger.warning(f"Config path from {CONFIG_ENV_VAR} doesn't exist: {config_path}")

    # 2. Check default location
    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    return None


def is_type(value: Any, types: tuple) -> bool:
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and bool not in types:
        return False
    return isinstance(value, types)


def check_option_types(options: Dict[str, Any], types: Dict[str, tuple]) -> None:
    """
    Check option values against a type table. None means unset and is allowed.

    Raises:
        ValueError: On a value of the wrong type
    """
    for key, value in options.items():
        if value is not None and key in types and not is_type(value, types[key]):
            expected = " or ".join(t.__name__ for t in types[key])
            raise ValueError(f"Option '{key}' must be {expected}, got {value!r}")


def _validate(config: Dict[str, Any], config_path: str) -> None:
    for key, value in config.items():
        if key not in _TOP_LEVEL_KEYS:
            raise ConfigError(
                f"Unknown key '{key}' in config at {config_path}\n"
                f"Supported keys: {', '.join(sorted(_TOP_LEVEL_KEYS))}"
            )
        if not is_type(value, _TOP_LEVEL_KEYS[key]):
            raise ConfigError(f"Invalid value for '{key}' in config at {config_path}: {value!r}")

    if config.get("cache_stale", 0) < 0:
        raise ConfigError(f"'cache_stale' must be non-negative in config at {config_path}")

    if config.get("retry_max_attempts", 1) < 1:
        raise ConfigError(f"'retry_max_attempts' must be at least 1 in config at {config_path}")

    for key, value in config.get("create", {}).items():
        if key not in CREATE_OPTION_TYPES:
            raise ConfigError(
                f"Unknown key 'create.{key}' in config at {config_path}\n"
                f"Supported keys: {', '.join(sorted(CREATE_OPTION_TYPES))}"
            )
        if not is_type(value, CREATE_OPTION_TYPES[key]):
            raise ConfigError(f"Invalid value for 'create.{key}' in config at {config_path}: {value!r}")

    try:
        CreateOptions.from_dict(config.get("create", {}))
    except ValueError as e:
        raise ConfigError(f"Invalid 'create' section in config at {config_path}: {e}")


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    The file is optional: without one, an empty dict is returned and every
    caller falls back to built-in defaults.

    Returns:
        Dict containing any of the keys:
        - region, instance_metadata, cache_stale, ignore_cache, retry_max_attempts
        - create: dict of CreateOptions fields

    Raises:
        ConfigError: If the config file is unreadable, not YAML, or invalid
    """
    # Get config path dynamically each time (not cached at module level)
    config_path = _get_config_path()
    if config_path is None:
        logger.debug("No config file found, using built-in defaults")
        return {}

    # Load YAML
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    # An empty file is the same as no file
    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    _validate(config, config_path)

    logger.debug(f"Configuration loaded successfully from {config_path}")
    return config


def create_defaults(config: Dict[str, Any]) -> CreateOptions:
    """CreateOptions built from the config's 'create' section."""
    return CreateOptions.from_dict(config.get("create", {}))


def lookup_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Default lookup arguments, with config values layered over built-ins."""
    return {
        "cache_stale": float(config.get("cache_stale", DEFAULT_CACHE_STALE)),
        "ignore_cache": config.get("ignore_cache", False),
        "create_options": create_defaults(config),
    }
