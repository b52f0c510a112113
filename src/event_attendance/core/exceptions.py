from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidWindow(ValidationError):
    """Raised when a time window is built with start >= end."""


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class SessionNotAccepting(DomainError):
    """Raised when a session accepts no scans at the requested instant."""

    def __init__(self, message: str, *, status: Optional[object] = None):
        super().__init__(message)
        self.status = status


class PersistenceConflict(DomainError):
    """Raised by a repository when a uniqueness constraint rejects a write."""
