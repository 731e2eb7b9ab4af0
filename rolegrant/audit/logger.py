"""
Audit logging module for token lifecycle operations.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from datetime import datetime
from collections import deque
import asyncio
import json
import logging

import aiofiles

from ..core.types import AuditEvent


logger = logging.getLogger(__name__)


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    @abstractmethod
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        token_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        pass

    async def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


def _matches(
    event: AuditEvent,
    token_id: Optional[str],
    event_type: Optional[str],
    start_time: Optional[datetime],
    end_time: Optional[datetime],
) -> bool:
    if token_id and event.token_id != token_id:
        return False
    if event_type and event.event_type != event_type:
        return False
    if start_time and event.timestamp < start_time:
        return False
    if end_time and event.timestamp > end_time:
        return False
    return True


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event to memory"""
        async with self._lock:
            self.events.append(event)

    async def get_events(
        self,
        token_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        async with self._lock:
            return [
                event for event in self.events
                if _matches(event, token_id, event_type, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """File-based audit logger writing one JSON object per line"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        """Append an audit event to the file"""
        async with self._lock:
            try:
                async with aiofiles.open(self.file_path, "a", encoding="utf-8") as f:
                    await f.write(json.dumps(event.to_dict()) + "\n")
            except OSError as e:
                # the audited operation has already been committed
                logger.error(f"Failed to write audit log {self.file_path}: {e}")

    async def get_events(
        self,
        token_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events from file with optional filtering"""
        events = []

        try:
            async with aiofiles.open(self.file_path, "r", encoding="utf-8") as f:
                lines = await f.readlines()
        except FileNotFoundError:
            return events

        for line in lines:
            if not line.strip():
                continue
            try:
                event = AuditEvent.from_dict(json.loads(line))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed audit line in {self.file_path}: {e}")
                continue

            if _matches(event, token_id, event_type, start_time, end_time):
                events.append(event)

        return events


# Factory function for creating audit loggers
def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        return MemoryAuditLogger(kwargs.get("max_entries", 1000))
    elif logger_type == "file":
        return FileAuditLogger(kwargs.get("file_path", "audit.log"))
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
