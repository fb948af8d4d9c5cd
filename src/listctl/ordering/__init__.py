"""Position-maintenance engine: scopes, boundary reads, shifts, list operations."""

from listctl.ordering.engine import BoundList, ListOperationEngine
from listctl.ordering.errors import (
    ConstraintViolation,
    InvalidTargetPosition,
    ItemNotFound,
    OrderingError,
    StaleScopeRead,
)
from listctl.ordering.scope import CompositeScope, Condition, KeyScope, PredicateScope, Scope

__all__ = [
    "BoundList",
    "CompositeScope",
    "Condition",
    "ConstraintViolation",
    "InvalidTargetPosition",
    "ItemNotFound",
    "KeyScope",
    "ListOperationEngine",
    "OrderingError",
    "PredicateScope",
    "Scope",
    "StaleScopeRead",
]
