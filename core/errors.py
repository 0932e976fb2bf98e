"""
Store error hierarchy.

Every failure raised by a store is a StoreError carrying the backend exception
that caused it (``backend_error``, also chained as ``__cause__``). A lookup
that matches nothing is not an error: stores return None for it.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from bson.errors import BSONError
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    OperationFailure,
    PyMongoError,
)

from core.logger import logger

# Server error codes for rejected input: BadValue, FailedToParse,
# TypeMismatch, DollarPrefixedFieldName, InvalidOptions,
# DocumentValidationFailure
VALIDATION_ERROR_CODES = frozenset({2, 9, 14, 52, 72, 121})
DUPLICATE_KEY_CODES = frozenset({11000, 11001})

# Exceptions a store translates; anything else propagates untouched
BACKEND_ERRORS = (PyMongoError, BSONError, PydanticValidationError)


class StoreError(Exception):
    """Base exception for all store failures."""

    def __init__(self, message: str, backend_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.backend_error = backend_error


class PersistenceError(StoreError):
    """Backend unreachable, timed out, or failed internally."""


class ValidationError(StoreError):
    """Submitted data, filter, patch or options were rejected."""


class DuplicateEntityError(ValidationError):
    """A unique index rejected the write."""

    def __init__(
        self,
        message: str,
        backend_error: Optional[BaseException] = None,
        key_value: Optional[dict] = None,
    ):
        super().__init__(message, backend_error)
        self.key_value = key_value


def _error_code(exc: BaseException) -> Any:
    return getattr(exc, "code", None)


def translate_backend_error(exc: BaseException) -> StoreError:
    """
    Map a driver, BSON or model exception to the store error hierarchy.

    Args:
        exc: Exception raised while talking to the backend

    Returns:
        StoreError wrapping ``exc``
    """
    if isinstance(exc, StoreError):
        return exc

    message = str(exc)

    if isinstance(exc, DuplicateKeyError) or (
        isinstance(exc, OperationFailure) and _error_code(exc) in DUPLICATE_KEY_CODES
    ):
        details = getattr(exc, "details", None) or {}
        return DuplicateEntityError(
            message, backend_error=exc, key_value=details.get("keyValue")
        )

    if isinstance(exc, ExecutionTimeout):
        return PersistenceError(message, backend_error=exc)

    if isinstance(exc, OperationFailure) and _error_code(exc) in VALIDATION_ERROR_CODES:
        return ValidationError(message, backend_error=exc)

    if isinstance(exc, (BSONError, PydanticValidationError)):
        return ValidationError(message, backend_error=exc)

    if isinstance(exc, ConnectionFailure):
        return PersistenceError(f"Backend unreachable: {message}", backend_error=exc)

    return PersistenceError(message, backend_error=exc)


@contextmanager
def translating_errors(action: str) -> Iterator[None]:
    """
    Log and translate backend failures raised inside the block.

    Args:
        action: What the block does, for the log line ("update task in tasks")

    Raises:
        StoreError: Translated from the backend exception
    """
    try:
        yield
    except StoreError as e:
        logger.error(f"❌ Failed to {action}: {e}")
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"❌ Failed to {action}: {e}")
        raise translate_backend_error(e) from e


__all__ = [
    "BACKEND_ERRORS",
    "DuplicateEntityError",
    "PersistenceError",
    "StoreError",
    "ValidationError",
    "translate_backend_error",
    "translating_errors",
]
