"""
Core types and data structures for rolegrant.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum
import uuid

from ..common.utils import get_current_time, ensure_utc


# Token identifiers are unsigned 128-bit integers
TokenId = int


@dataclass
class TokenRecord:
    """Privileges bound to a token, its remaining uses and its expiration"""
    privileges: List[str]
    remaining_uses: int
    expiration: datetime

    def __post_init__(self):
        self.expiration = ensure_utc(self.expiration)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """A token is expired strictly after its expiration instant"""
        return (now or get_current_time()) > self.expiration

    def copy(self) -> "TokenRecord":
        """Return an independent copy of the record"""
        return TokenRecord(
            privileges=list(self.privileges),
            remaining_uses=self.remaining_uses,
            expiration=self.expiration,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "privileges": list(self.privileges),
            "remaining_uses": self.remaining_uses,
            "expiration": self.expiration.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenRecord":
        """Create from dictionary (from JSON)"""
        return cls(
            privileges=list(data["privileges"]),
            remaining_uses=data["remaining_uses"],
            expiration=datetime.fromisoformat(data["expiration"]),
        )


class AuditEventType(Enum):
    """Lifecycle events written to the audit trail"""
    TOKEN_ISSUED = "token_issued"
    TOKEN_REVOKED = "token_revoked"
    TOKEN_REDEEMED = "token_redeemed"
    TOKEN_REDEEM_FAILED = "token_redeem_failed"
    TOKENS_PURGED = "tokens_purged"


@dataclass
class AuditEvent:
    """Audit event for logging and compliance"""
    event_id: str
    event_type: str  # one of AuditEventType values
    token_id: Optional[str] = None
    timestamp: datetime = field(default_factory=get_current_time)
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid.uuid4())
        if isinstance(self.event_type, AuditEventType):
            self.event_type = self.event_type.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON lines storage"""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "token_id": self.token_id,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        """Create from dictionary"""
        return cls(
            event_id=data["event_id"],
            event_type=data["event_type"],
            token_id=data.get("token_id"),
            timestamp=ensure_utc(datetime.fromisoformat(data["timestamp"])),
            details=data.get("details") or {},
        )
