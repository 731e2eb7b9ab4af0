"""
Validation utilities for rolegrant.
Provides validation of the inputs callers hand to the lifecycle manager.
"""

import re
from datetime import timedelta
from typing import Any, List, Sequence, Union

from ..common.utils import MAX_TOKEN_ID
from ..errors import ErrorCode, ValidationError, create_validation_error


_TOKEN_ID_PATTERN = re.compile(r'^\d{1,39}$')


def parse_token_id(value: Union[int, str]) -> int:
    """
    Parse a token identifier given as an int or its decimal string.

    Raises:
        ValidationError: If the value is not an unsigned 128-bit integer
    """
    if isinstance(value, bool):
        raise create_validation_error("token id must be an integer", field="token_id")

    if isinstance(value, str):
        text = value.strip()
        if not _TOKEN_ID_PATTERN.match(text):
            raise create_validation_error(f"invalid token id: {value!r}", field="token_id")
        value = int(text)

    if not isinstance(value, int):
        raise create_validation_error("token id must be an integer", field="token_id")

    if not 0 <= value <= MAX_TOKEN_ID:
        raise create_validation_error("token id out of range", field="token_id")

    return value


def is_valid_privilege(privilege: Any) -> bool:
    """Check a privilege identifier is a non-empty string."""
    return isinstance(privilege, str) and bool(privilege.strip())


def validate_privileges(privileges: Sequence[str]) -> List[str]:
    """
    Validate the privilege identifiers bound to a new token.

    Order and duplicates are kept as given.
    """
    if isinstance(privileges, (str, bytes)) or not isinstance(privileges, Sequence):
        raise create_validation_error("privileges must be a sequence of identifiers", field="privileges")

    if not privileges:
        raise create_validation_error("at least one privilege is required", field="privileges")

    for privilege in privileges:
        if not is_valid_privilege(privilege):
            raise create_validation_error(f"invalid privilege identifier: {privilege!r}", field="privileges")

    return list(privileges)


def validate_uses(limit: Any) -> int:
    """Validate a use limit: an integer >= 0."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError("use limit must be an integer", field="limit",
                              code=ErrorCode.INVALID_PARAMETER)
    if limit < 0:
        raise ValidationError("use limit must be >= 0", field="limit",
                              code=ErrorCode.INVALID_PARAMETER)
    return limit


def validate_ttl(ttl: Any) -> timedelta:
    """Validate a time-to-live: a non-negative timedelta."""
    if not isinstance(ttl, timedelta):
        raise ValidationError("ttl must be a timedelta", field="ttl",
                              code=ErrorCode.INVALID_PARAMETER)
    if ttl < timedelta(0):
        raise ValidationError("ttl must not be negative", field="ttl",
                              code=ErrorCode.INVALID_PARAMETER)
    return ttl
