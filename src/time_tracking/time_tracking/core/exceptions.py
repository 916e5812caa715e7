from __future__ import annotations

from typing import Iterable, Optional

from .enums import FailureKind, FailureReason


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: FailureKind = FailureKind.VALIDATION
    retryable: bool = False
    default_reason: FailureReason = FailureReason.INVALID_INPUT

    def __init__(
        self,
        message: str,
        *,
        reason: Optional[FailureReason] = None,
        errors: Iterable[str] = (),
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason
        self.errors = tuple(errors)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced user or session does not exist."""

    kind = FailureKind.NOT_FOUND
    default_reason = FailureReason.SESSION_NOT_FOUND


class ConflictError(DomainError):
    """Raised when a concurrent write hit the same (user, date) key.

    Callers may resubmit the action.
    """

    kind = FailureKind.CONFLICT
    retryable = True
    default_reason = FailureReason.CONCURRENT_MODIFICATION


class StorageError(DomainError):
    """Raised when the storage backend failed or timed out."""

    kind = FailureKind.STORAGE
    default_reason = FailureReason.STORAGE_ERROR
