"""
Structured error handling for rolegrant.

Every failure surfaced by the token store or the lifecycle manager is a
RoleGrantError carrying an ErrorCode and an ErrorSource, so callers can tell
"token never existed" (TOKEN_NOT_FOUND) from "token used up or past its
expiration" (TOKEN_EXPIRED) and from storage failures.
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


class ErrorCode(Enum):
    """Structured error codes for rolegrant."""

    # Token related errors
    TOKEN_NOT_FOUND = "token_not_found"
    TOKEN_EXPIRED = "token_expired"

    # Store/Storage errors
    STORAGE_IO_ERROR = "storage_io_error"
    STORAGE_FORMAT_ERROR = "storage_format_error"
    STORE_EXISTS = "store_exists"

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_PARAMETER = "invalid_parameter"

    # Configuration errors
    CONFIGURATION_ERROR = "configuration_error"


class ErrorSource(Enum):
    """Sources where errors can originate."""

    TOKEN_STORE = "token_store"
    STORAGE = "storage"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Additional context for errors."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)


class RoleGrantError(Exception):
    """
    Base exception class for all rolegrant errors.

    Provides structured error information with an error code, the
    component the error originated from, additional context and the
    underlying cause when one exists.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        source: ErrorSource = ErrorSource.TOKEN_STORE,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.code = code
        self.message = message
        self.source = source
        self.context = context or ErrorContext()
        self.cause = cause

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": self.code.value,
            "error_description": self.message,
            "error_source": self.source.value,
            "timestamp": self.context.timestamp.isoformat(),
        }

        if self.context.metadata:
            result["metadata"] = self.context.metadata

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result

    def is_storage_error(self) -> bool:
        """Check if the error leaves the durable state ambiguous."""
        return self.source == ErrorSource.STORAGE


class TokenError(RoleGrantError):
    """Errors related to token redemption and lookup."""

    def __init__(self, code: ErrorCode, message: str, token_id: Optional[int] = None, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        if token_id is not None:
            context.metadata["token_id"] = str(token_id)

        super().__init__(
            code=code,
            message=message,
            source=ErrorSource.TOKEN_STORE,
            context=context,
            **kwargs
        )
        self.token_id = token_id


class TokenNotFoundError(TokenError):
    """Raised when a token identifier is absent from the store."""

    def __init__(self, token_id: Optional[int] = None, message: str = "token not found", **kwargs):
        super().__init__(ErrorCode.TOKEN_NOT_FOUND, message, token_id=token_id, **kwargs)


class TokenExpiredError(TokenError):
    """Raised when a token is past its expiration or has no uses left."""

    def __init__(self, token_id: Optional[int] = None, message: str = "token expired", **kwargs):
        super().__init__(ErrorCode.TOKEN_EXPIRED, message, token_id=token_id, **kwargs)


class StorageError(RoleGrantError):
    """Errors related to the durable store file."""

    def __init__(self, code: ErrorCode, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        if path is not None:
            context.metadata["path"] = str(path)

        super().__init__(
            code=code,
            message=message,
            source=ErrorSource.STORAGE,
            context=context,
            **kwargs
        )
        self.path = path


class StoreIOError(StorageError):
    """The store file could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(ErrorCode.STORAGE_IO_ERROR, message, path=path, **kwargs)


class StoreFormatError(StorageError):
    """The store file content is malformed."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(ErrorCode.STORAGE_FORMAT_ERROR, message, path=path, **kwargs)


class StoreExistsError(StorageError):
    """Initialization was asked to create a store file that already exists."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(ErrorCode.STORE_EXISTS, message, path=path, **kwargs)


class ValidationError(RoleGrantError):
    """Errors related to input validation."""

    def __init__(self, message: str, field: Optional[str] = None,
                 code: ErrorCode = ErrorCode.VALIDATION_FAILED, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        if field:
            context.metadata["field"] = field

        super().__init__(
            code=code,
            message=message,
            source=ErrorSource.VALIDATION,
            context=context,
            **kwargs
        )
        self.field = field


class ConfigurationError(RoleGrantError):
    """Errors related to configuration loading and validation."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            source=ErrorSource.CONFIGURATION,
            **kwargs
        )


# Error utility functions
def create_validation_error(message: str, field: Optional[str] = None) -> ValidationError:
    """Create a validation error."""
    return ValidationError(message=message, field=field)


__all__ = [
    "ErrorCode",
    "ErrorSource",
    "ErrorContext",
    "RoleGrantError",
    "TokenError",
    "TokenNotFoundError",
    "TokenExpiredError",
    "StorageError",
    "StoreIOError",
    "StoreFormatError",
    "StoreExistsError",
    "ValidationError",
    "ConfigurationError",
    "create_validation_error",
]
