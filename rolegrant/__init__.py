"""
rolegrant Python Package

Use-limited, time-bounded access tokens that grant a set of privileges
(roles) to whoever redeems them, backed by a write-through JSON store.
"""

__version__ = "0.1.0"

from .core.lifecycle import TokenLifecycleManager
from .core.config import Config
from .core.types import TokenRecord, TokenId
from .tokenstore import TokenStore
from .errors import (
    RoleGrantError,
    TokenNotFoundError,
    TokenExpiredError,
    StoreIOError,
    StoreFormatError,
    StoreExistsError,
    ValidationError,
)

__all__ = [
    "TokenLifecycleManager",
    "Config",
    "TokenRecord",
    "TokenId",
    "TokenStore",
    "RoleGrantError",
    "TokenNotFoundError",
    "TokenExpiredError",
    "StoreIOError",
    "StoreFormatError",
    "StoreExistsError",
    "ValidationError",
]
