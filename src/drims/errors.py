"""Error taxonomy shared by every DRIMS service."""

from __future__ import annotations


class DrimsError(RuntimeError):
    """Base class for errors surfaced to callers of the core."""


class NotFoundError(DrimsError):
    """Raised when a referenced record or profile does not exist."""


class UnauthorizedError(DrimsError):
    """Raised when the acting user may not touch the record."""


class ValidationError(DrimsError):
    """Raised for missing required values or out-of-domain input."""


class InvalidStateTransition(DrimsError):
    """Raised when the approval status forbids the requested change."""


class StoreFailure(DrimsError):
    """Raised when the underlying database cannot complete an operation."""


class ConcurrentUpdateError(StoreFailure):
    """Raised when a record changed between read and write."""
