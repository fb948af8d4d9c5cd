"""Scope definitions — which rows share a list with a given item.

Three variants, discriminated by ``kind``:

- ``key``: one foreign key column (``todo_list`` is read as ``todo_list_id``).
- ``composite``: several columns that must all match.
- ``predicate``: a conjunction of parameterized conditions. Values are
  always bound parameters, either literals or the item's own attributes;
  raw SQL fragments are not accepted.

Predicate scopes cannot tell when an item left its list, so they always
report "unchanged" and "not a cascade".
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy import and_, true

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Table

    from listctl.domain.item import Item

ConditionOp = Literal["eq", "ne", "lt", "le", "gt", "ge", "is_null", "not_null"]

_BINARY_OPS: dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
}


def idify(name: str) -> str:
    """Append ``_id`` to a scope name unless it already ends with it."""
    return name if name.endswith("_id") else f"{name}_id"


class Condition(BaseModel):
    """One ``column <op> value`` term of a predicate scope."""

    model_config = {"frozen": True}

    column: str
    op: ConditionOp = "eq"
    value: Any = None
    attribute: str | None = None

    @model_validator(mode="after")
    def _one_operand(self) -> Condition:
        if self.attribute is not None and self.value is not None:
            msg = f"Condition on {self.column!r} takes either 'value' or 'attribute', not both"
            raise ValueError(msg)
        return self

    def clause(self, table: Table, item: Item) -> ColumnElement[bool]:
        column = table.c[self.column]
        if self.op == "is_null":
            return column.is_(None)
        if self.op == "not_null":
            return column.is_not(None)
        operand = item[self.attribute] if self.attribute is not None else self.value
        return _BINARY_OPS[self.op](column, operand)


class KeyScope(BaseModel):
    """List keyed by a single column."""

    model_config = {"frozen": True}

    kind: Literal["key"] = "key"
    key: str

    @field_validator("key")
    @classmethod
    def _idify(cls, value: str) -> str:
        return idify(value)

    @property
    def attributes(self) -> tuple[str, ...]:
        return (self.key,)

    def condition(self, table: Table, item: Item) -> ColumnElement[bool]:
        return table.c[self.key] == item[self.key]

    def changed(self, item: Item) -> bool:
        return item.changed(self.key)

    def destroyed_via(self, item: Item) -> bool:
        return item.destroyed_by is not None and item.destroyed_by == self.key


class CompositeScope(BaseModel):
    """List keyed by several columns together."""

    model_config = {"frozen": True}

    kind: Literal["composite"] = "composite"
    keys: tuple[str, ...] = Field(min_length=1)

    @property
    def attributes(self) -> tuple[str, ...]:
        return self.keys

    def condition(self, table: Table, item: Item) -> ColumnElement[bool]:
        return and_(*(table.c[key] == item[key] for key in self.keys))

    def changed(self, item: Item) -> bool:
        return any(item.changed(key) for key in self.keys)

    def destroyed_via(self, item: Item) -> bool:
        return item.destroyed_by is not None and item.destroyed_by in self.keys


class PredicateScope(BaseModel):
    """List defined by parameterized conditions; empty means the whole table."""

    model_config = {"frozen": True}

    kind: Literal["predicate"] = "predicate"
    conditions: tuple[Condition, ...] = ()

    @property
    def attributes(self) -> tuple[str, ...]:
        return tuple(c.attribute for c in self.conditions if c.attribute is not None)

    def condition(self, table: Table, item: Item) -> ColumnElement[bool]:
        if not self.conditions:
            return true()
        return and_(*(c.clause(table, item) for c in self.conditions))

    def changed(self, item: Item) -> bool:
        return False

    def destroyed_via(self, item: Item) -> bool:
        return False


Scope = Annotated[KeyScope | CompositeScope | PredicateScope, Field(discriminator="kind")]
