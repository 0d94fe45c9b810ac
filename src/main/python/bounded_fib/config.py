"""
Configuration loading.

Settings come from built-in defaults, then an optional YAML file, then
environment variables. A ``.env`` file in the working directory is loaded
into the environment first.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from bounded_fib.accessor import DEFAULT_COLLECTION
from bounded_fib.errors import ConfigurationError
from bounded_fib.sequence import MAX_COUNT

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "BOUNDED_FIB_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "count": 10,
    "width": None,
    "max_count": MAX_COUNT,
    "collection": list(DEFAULT_COLLECTION),
    "host": "0.0.0.0",
    "port": 50061,
}

# environment variable -> (config key, converter)
ENV_OVERRIDES = {
    "BOUNDED_FIB_COUNT": ("count", int),
    "BOUNDED_FIB_WIDTH": ("width", int),
    "BOUNDED_FIB_MAX_COUNT": ("max_count", int),
    "MODULE_HOST": ("host", str),
    "MODULE_PORT": ("port", int),
}


def _read_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _apply_env(config: Dict[str, Any]) -> None:
    for env_name, (key, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None or value == "":
            continue
        try:
            config[key] = convert(value)
        except ValueError:
            raise ConfigurationError(f"{env_name} must be {convert.__name__}, got {value!r}")
        logger.debug(f"Config {key} overridden from {env_name}")


def _validate(config: Dict[str, Any]) -> Dict[str, Any]:
    def is_int(value):
        return isinstance(value, int) and not isinstance(value, bool)

    unknown = set(config) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    if not is_int(config["count"]) or config["count"] < 0:
        raise ConfigurationError("count must be a non-negative integer")
    if config["width"] is not None and (not is_int(config["width"]) or config["width"] <= 0):
        raise ConfigurationError("width must be a positive integer or null")
    if not is_int(config["max_count"]) or not 0 <= config["max_count"] <= MAX_COUNT:
        raise ConfigurationError(f"max_count must be an integer between 0 and {MAX_COUNT}")
    if config["count"] > config["max_count"]:
        raise ConfigurationError("count must not exceed max_count")
    if not isinstance(config["collection"], list) or not all(is_int(v) for v in config["collection"]):
        raise ConfigurationError("collection must be a list of integers")
    if not isinstance(config["host"], str) or not config["host"]:
        raise ConfigurationError("host must be a non-empty string")
    if not is_int(config["port"]) or not 0 <= config["port"] <= 65535:
        raise ConfigurationError("port must be an integer between 0 and 65535")
    return config


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the effective configuration.

    Args:
        path: Optional YAML file. Falls back to the ``BOUNDED_FIB_CONFIG``
            environment variable; with neither set only defaults and
            environment overrides apply.

    Returns:
        The validated configuration dictionary

    Raises:
        ConfigurationError: If the file is missing or any value is invalid
    """
    load_dotenv()

    config = copy.deepcopy(DEFAULT_CONFIG)
    path = path or os.environ.get(CONFIG_PATH_ENV)
    if path:
        config.update(_read_yaml(path))
        logger.info(f"Configuration loaded from {path}")

    _apply_env(config)
    return _validate(config)
