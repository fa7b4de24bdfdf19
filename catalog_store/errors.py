"""
Error taxonomy for the catalog store.

Every failure the store or the runtime codec reports is a `StoreError`
subclass tagged with exactly one `ErrorKind`. Only `ValidationFailure`
carries field-keyed messages. Callers at the HTTP boundary translate errors
with `status_code_for` and `error_payload`.

Exceptions that are not `StoreError` (programming faults, a corrupted pool)
are never translated here; they propagate to the boundary as a generic fatal
condition.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorKind(str, Enum):
    VALIDATION_FAILURE = "validation_failure"
    NOT_FOUND = "not_found"
    EDIT_CONFLICT = "edit_conflict"
    INVALID_FORMAT = "invalid_format"
    CONSTRAINT_VIOLATION = "constraint_violation"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """Base class for every structured catalog store error."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_message: str = "the server encountered a problem and could not process your request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class ValidationFailure(StoreError):
    """One or more fields broke a validation rule."""

    kind = ErrorKind.VALIDATION_FAILURE
    default_message = "validation failed"

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"validation failed: {fields}")


class RecordNotFound(StoreError):
    kind = ErrorKind.NOT_FOUND
    default_message = "the requested resource could not be found"


class EditConflict(StoreError):
    kind = ErrorKind.EDIT_CONFLICT
    default_message = "unable to update the record due to an edit conflict, please try again"


class InvalidFormat(StoreError):
    kind = ErrorKind.INVALID_FORMAT
    default_message = "invalid runtime format"


class ConstraintViolation(StoreError):
    """A storage-level uniqueness constraint rejected the write."""

    kind = ErrorKind.CONSTRAINT_VIOLATION
    default_message = "a unique constraint was violated"

    def __init__(self, message: Optional[str] = None, constraint: Optional[str] = None) -> None:
        super().__init__(message)
        self.constraint = constraint


class QueryTimeout(StoreError):
    kind = ErrorKind.TIMEOUT
    default_message = "the database operation did not complete before its deadline"


class UnknownStoreError(StoreError):
    kind = ErrorKind.UNKNOWN


_STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILURE: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EDIT_CONFLICT: 409,
    ErrorKind.INVALID_FORMAT: 400,
    ErrorKind.CONSTRAINT_VIOLATION: 409,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNKNOWN: 500,
}


def status_code_for(error: BaseException) -> int:
    """
    Map an error to the HTTP status the boundary should answer with.

    Anything that is not a StoreError is an internal fault and maps to 500.
    """
    if isinstance(error, StoreError):
        return _STATUS_CODES[error.kind]
    return 500


def error_payload(error: BaseException) -> Dict[str, Any]:
    """
    Build the client-facing error body.

    Validation failures expose the full field map. Unknown and fatal errors get
    a fixed message so internal details never leak.
    """
    if isinstance(error, ValidationFailure):
        return {"error": dict(error.errors)}
    if isinstance(error, StoreError) and error.kind is not ErrorKind.UNKNOWN:
        return {"error": error.message}
    return {"error": StoreError.default_message}


__all__ = [
    "ErrorKind",
    "StoreError",
    "ValidationFailure",
    "RecordNotFound",
    "EditConflict",
    "InvalidFormat",
    "ConstraintViolation",
    "QueryTimeout",
    "UnknownStoreError",
    "status_code_for",
    "error_payload",
]
