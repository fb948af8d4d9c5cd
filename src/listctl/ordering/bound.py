"""BoundList — a list configuration resolved against a concrete table.

Resolution happens once, when an engine is set up: the position column
and primary key are looked up, the schema default for the column is
read, and the update mode (sequential or bulk) is decided. Everything
downstream reads these values instead of re-inspecting the schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from listctl.infrastructure.database.introspection import sequential_required
from listctl.infrastructure.database.schema import default_position

if TYPE_CHECKING:
    from sqlalchemy import Column, ColumnElement, Connection, Table

    from listctl.config.models import ListConfig
    from listctl.domain.item import Item
    from listctl.ordering.scope import CompositeScope, KeyScope, PredicateScope


@dataclass(frozen=True)
class BoundList:
    """A position column of *table* configured by *config*."""

    table: Table
    config: ListConfig
    sequential: bool
    default_position: int | None

    @classmethod
    def resolve(cls, conn: Connection, table: Table, config: ListConfig) -> BoundList:
        """Bind *config* to *table*, deciding the update mode from the live schema."""
        if config.column not in table.c:
            msg = f"Table {table.name!r} has no column {config.column!r}"
            raise ValueError(msg)
        if len(table.primary_key.columns) != 1:
            msg = f"Table {table.name!r} needs a single-column primary key to be ordered"
            raise ValueError(msg)
        return cls(
            table=table,
            config=config,
            sequential=sequential_required(
                conn, table.name, config.column, config.sequential_override
            ),
            default_position=default_position(table, config.column),
        )

    @property
    def column(self) -> Column[Any]:
        return self.table.c[self.config.column]

    @property
    def name(self) -> str:
        return self.config.column

    @property
    def pk(self) -> Column[Any]:
        return next(iter(self.table.primary_key.columns))

    @property
    def top(self) -> int:
        return self.config.top

    @property
    def scope(self) -> KeyScope | CompositeScope | PredicateScope:
        return self.config.scope

    def id_of(self, item: Item) -> Any:
        return item[self.pk.name]

    def position_of(self, item: Item) -> int | None:
        value = item[self.name]
        return None if value is None else int(value)

    def in_list(self, item: Item) -> bool:
        return item[self.name] is not None

    def scope_condition(self, item: Item) -> ColumnElement[bool]:
        """Rows sharing *item*'s list that currently hold a position."""
        return self.scope.condition(self.table, item) & self.column.is_not(None)

    def is_default_position(self, item: Item) -> bool:
        return self.default_position is not None and item[self.name] == self.default_position
