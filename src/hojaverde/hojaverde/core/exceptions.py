from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced area or employee does not exist."""


class ConflictError(DomainError):
    """Raised when an attendance record already exists for (employee, date)."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageFailure(Exception):
    """Transaction-level fault (connectivity loss, deadlock, ...).

    Fatal to the whole batch; nothing of the batch is committed.
    """

    def __init__(self, message: str, *, elapsed_seconds: Optional[float] = None):
        super().__init__(message)
        self.elapsed_seconds = elapsed_seconds
