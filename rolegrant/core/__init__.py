"""
Core module initialization
"""

from .config import Config
from .types import TokenId, TokenRecord, AuditEvent, AuditEventType
from .lifecycle import TokenLifecycleManager

__all__ = [
    "Config",
    "TokenId",
    "TokenRecord",
    "AuditEvent",
    "AuditEventType",
    "TokenLifecycleManager",
]
