"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, listctl.toml only contains
overrides. A list needs at least its ``table``; everything else falls
back to ``position`` ordered from 1, whole-table scope, new items at
the bottom, and auto-detected update mode.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from listctl.domain.types import AddNewAt
from listctl.ordering.scope import PredicateScope, Scope

# --- listctl.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite:///listctl.db"
    echo: bool = False


class ListConfig(BaseModel):
    """One [lists.<name>] section — an independently ordered column.

    Attributes:
        table: Table holding the ordered rows.
        column: Integer position column.
        scope: Which rows share a list. A bare string is a key scope, a
            list of strings a composite scope.
        top: Position of the first item.
        add_new_at: Where created items are placed (``none`` leaves them
            unpositioned).
        sequential_updates: ``auto`` detects a unique index on *column*;
            ``true`` / ``false`` override the detection.
    """

    model_config = {"frozen": True}

    table: str = ""
    column: str = "position"
    scope: Scope = Field(default_factory=PredicateScope)
    top: int = 1
    add_new_at: AddNewAt = AddNewAt.BOTTOM
    sequential_updates: bool | Literal["auto"] = "auto"

    @field_validator("scope", mode="before")
    @classmethod
    def _shorthand_scope(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"kind": "key", "key": value}
        if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
            return {"kind": "composite", "keys": tuple(value)}
        return value

    @property
    def sequential_override(self) -> bool | None:
        """Explicit update mode, or None when it should be detected."""
        if self.sequential_updates == "auto":
            return None
        return bool(self.sequential_updates)

