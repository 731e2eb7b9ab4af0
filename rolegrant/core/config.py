"""
Configuration module for rolegrant.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field, fields

from ..errors import ConfigurationError
from ..util.config import (
    get_config_value,
    get_bool_config,
    get_int_config,
    parse_duration_string,
    load_config_file,
)


DEFAULT_STORE_PATH = "tokens.json"
DEFAULT_USES = 1
DEFAULT_TTL = timedelta(hours=96)


@dataclass
class Config:
    """Configuration for the token lifecycle manager"""
    store_path: str = DEFAULT_STORE_PATH
    default_uses: int = DEFAULT_USES
    default_ttl: timedelta = field(default_factory=lambda: DEFAULT_TTL)
    # Never create the store file unless asked to
    create_if_missing: bool = False
    audit_log_path: Optional[str] = None
    audit_max_entries: int = 1000
    metrics_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from ROLEGRANT_* environment variables"""
        ttl = get_config_value("default_ttl")
        return cls(
            store_path=get_config_value("store_path", DEFAULT_STORE_PATH),
            default_uses=get_int_config("default_uses", DEFAULT_USES),
            default_ttl=parse_duration_string(ttl) if ttl else DEFAULT_TTL,
            create_if_missing=get_bool_config("create_if_missing", False),
            audit_log_path=get_config_value("audit_log_path"),
            audit_max_entries=get_int_config("audit_max_entries", 1000),
            metrics_enabled=get_bool_config("metrics_enabled", True),
            log_level=get_config_value("log_level", "INFO"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from a mapping, durations given as strings"""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values = dict(data)
        if "default_ttl" in values:
            values["default_ttl"] = _as_timedelta(values["default_ttl"])
        return cls(**values)

    @classmethod
    def from_file(cls, file_path: str) -> "Config":
        """Create configuration from a YAML or JSON file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.store_path:
            raise ConfigurationError("store_path is required")
        if isinstance(self.default_uses, bool) or not isinstance(self.default_uses, int) \
                or self.default_uses < 0:
            raise ConfigurationError("default_uses must be a non-negative integer")
        if not isinstance(self.default_ttl, timedelta) or self.default_ttl < timedelta(0):
            raise ConfigurationError("default_ttl must be a non-negative duration")
        if isinstance(self.audit_max_entries, bool) or not isinstance(self.audit_max_entries, int) \
                or self.audit_max_entries < 1:
            raise ConfigurationError("audit_max_entries must be positive")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        return True


def _as_timedelta(value: Union[str, int, float, timedelta]) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # bare numbers are hours
        try:
            return timedelta(hours=value)
        except (OverflowError, ValueError) as e:
            raise ConfigurationError(f"default_ttl out of range: {value}", cause=e)
    return parse_duration_string(value)
