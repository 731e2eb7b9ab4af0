"""
Configuration utilities for rolegrant.
Provides configuration loading and environment lookup helpers.
"""

import json
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigurationError


ENV_PREFIX = "ROLEGRANT_"


def get_config_value(key: str, default: Any = None,
                     cast_type: Optional[type] = None,
                     env_prefix: str = ENV_PREFIX) -> Any:
    """
    Get configuration value from environment or return default.
    Optionally cast to specified type.
    """
    env_key = f"{env_prefix}{key.upper()}"
    value = os.environ.get(env_key)

    if value is None:
        return default
    if cast_type is None:
        return value

    if cast_type == bool:
        return value.strip().lower() in ('true', '1', 'yes', 'on')

    try:
        return cast_type(value)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid value for {env_key}: {value!r}", cause=e)


def get_bool_config(key: str, default: bool = False,
                    env_prefix: str = ENV_PREFIX) -> bool:
    """Get boolean configuration value."""
    return get_config_value(key, default, bool, env_prefix)


def get_int_config(key: str, default: int = 0,
                   env_prefix: str = ENV_PREFIX) -> int:
    """Get integer configuration value."""
    return get_config_value(key, default, int, env_prefix)


def parse_duration_string(duration_str: str) -> timedelta:
    """
    Parse duration string like '30s', '5m', '2h', '1d' into timedelta.
    """
    if not isinstance(duration_str, str):
        raise ConfigurationError("Duration must be a string")

    duration_str = duration_str.strip().lower()

    # Pattern to match number followed by unit
    match = re.match(r'^(\d+(?:\.\d+)?)\s*([smhd])$', duration_str)

    if not match:
        raise ConfigurationError(f"Invalid duration format: {duration_str}")

    value, unit = match.groups()
    value = float(value)

    try:
        if unit == 's':
            return timedelta(seconds=value)
        elif unit == 'm':
            return timedelta(minutes=value)
        elif unit == 'h':
            return timedelta(hours=value)
        return timedelta(days=value)
    except OverflowError as e:
        raise ConfigurationError(f"Duration out of range: {duration_str}", cause=e)


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    path = Path(file_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    file_ext = path.suffix.lower()

    with open(path, 'r', encoding='utf-8') as f:
        try:
            if file_ext == '.json':
                data = json.load(f)
            elif file_ext in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {file_ext}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file {file_path}: {e}", cause=e)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")
    return data
