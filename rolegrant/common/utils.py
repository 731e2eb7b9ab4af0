"""
Common utilities and helper functions for rolegrant.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Union


TOKEN_ID_BITS = 128
MAX_TOKEN_ID = (1 << TOKEN_ID_BITS) - 1


def generate_token_id() -> int:
    """
    Generate a fresh 128-bit token identifier from a random UUID.

    No uniqueness check is made against existing identifiers.
    """
    return uuid.uuid4().int


def format_token_id(token_id: int) -> str:
    """Render a token identifier the way callers type it back in."""
    return str(token_id)


def get_current_time() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_duration(seconds: Union[int, float, timedelta]) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds, or a timedelta

    Returns:
        Formatted duration string
    """
    if isinstance(seconds, timedelta):
        seconds = seconds.total_seconds()

    if seconds < 0:
        return f"-{format_duration(-seconds)}"
    elif seconds < 1:
        return f"{int(seconds * 1000)}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        remaining_seconds = int(seconds % 60)
        return f"{minutes}m{remaining_seconds}s"
    else:
        hours = int(seconds // 3600)
        remaining_minutes = int((seconds % 3600) // 60)
        return f"{hours}h{remaining_minutes}m"
