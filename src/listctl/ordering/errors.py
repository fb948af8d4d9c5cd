"""Exceptions raised by the ordering engine.

None of these are retried. They propagate out of the engine and the
caller's transaction rolls back, leaving the list as it was.
"""

from __future__ import annotations

from typing import Any


class OrderingError(Exception):
    """Base class for list-ordering failures."""

    code = "ORDERING_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConstraintViolation(OrderingError):
    """A shift collided with a unique index on the position column."""

    code = "CONSTRAINT_VIOLATION"


class InvalidTargetPosition(OrderingError):
    """Requested position lies outside ``[top, bottom + 1]``."""

    code = "INVALID_POSITION"


class StaleScopeRead(OrderingError):
    """Stored scope values of a locked row no longer match the item's snapshot."""

    code = "STALE_SCOPE"


class ItemNotFound(OrderingError):
    """No row exists for the requested primary key."""

    code = "NOT_FOUND"
