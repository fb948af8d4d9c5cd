"""Ordering vocabulary shared across layers."""

from __future__ import annotations

from enum import StrEnum


class AddNewAt(StrEnum):
    """Where newly created items enter their list."""

    TOP = "top"
    BOTTOM = "bottom"
    NONE = "none"


class Boundary(StrEnum):
    """Which end of a scope a boundary read targets."""

    TOP = "top"
    BOTTOM = "bottom"


class MoveDirection(StrEnum):
    """Single-step and boundary moves exposed by the CLI."""

    TOP = "top"
    BOTTOM = "bottom"
    UP = "up"
    DOWN = "down"
