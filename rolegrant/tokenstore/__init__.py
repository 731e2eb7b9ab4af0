"""
Token store package for rolegrant.

This package provides the file-backed token store with its read/write
lock and JSON file format.
"""

from .store import (
    TokenStore,
    StoreSession,
)

from .lock import ReadWriteLock

from .codec import (
    FORMAT_VERSION,
    encode_tokens,
    decode_tokens,
)

__all__ = [
    "TokenStore",
    "StoreSession",
    "ReadWriteLock",
    "FORMAT_VERSION",
    "encode_tokens",
    "decode_tokens",
]
