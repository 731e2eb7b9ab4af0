"""
Audit trail for token lifecycle operations.
"""

from .logger import (
    AuditLogger,
    MemoryAuditLogger,
    FileAuditLogger,
    create_audit_logger,
)

__all__ = [
    "AuditLogger",
    "MemoryAuditLogger",
    "FileAuditLogger",
    "create_audit_logger",
]
