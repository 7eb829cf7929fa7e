from __future__ import annotations

from typing import Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class CheckInError(DomainError):
    """A rejected check-in attempt.

    Every kind is terminal for the attempt and is never retried internally.
    ``AlreadyRecorded`` is benign: the caller is already checked in.
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        super().__init__(message or kind.value)
        self.kind = kind

    @property
    def is_benign(self) -> bool:
        return self.kind == ErrorKind.ALREADY_RECORDED


class VerificationError(CheckInError):
    """Raised by a verification strategy when the evidence does not match."""


class DuplicateRecordError(DomainError):
    """Storage refused a second record for the same (session, student) pair."""
