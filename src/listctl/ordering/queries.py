"""Boundary and range reads over one scope.

Every read is restricted to "same scope, position not null" and runs on
the connection handed in by the caller, so reads made during a reorder
see that transaction's own uncommitted shifts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from listctl.domain.item import Item
from listctl.domain.types import Boundary
from listctl.ordering.errors import ItemNotFound

if TYPE_CHECKING:
    from sqlalchemy import Connection, Select

    from listctl.ordering.bound import BoundList


class PositionQueryEngine:
    """Read-side queries for one bound list."""

    def __init__(self, bound: BoundList) -> None:
        self._bound = bound

    def _scoped(self, item: Item, exclude_id: Any = None) -> Select[Any]:
        stmt = select(self._bound.table).where(self._bound.scope_condition(item))
        if exclude_id is not None:
            stmt = stmt.where(self._bound.pk != exclude_id)
        return stmt

    def _items(self, conn: Connection, stmt: Select[Any]) -> list[Item]:
        return [Item.from_row(row) for row in conn.execute(stmt).mappings()]

    # ------------------------------------------------------------------
    # Boundaries
    # ------------------------------------------------------------------

    def boundary(
        self,
        conn: Connection,
        item: Item,
        which: Boundary,
        *,
        exclude_id: Any = None,
    ) -> Item | None:
        """Top-most or bottom-most item of *item*'s scope, or None if empty."""
        column = self._bound.column
        order = column.desc() if which is Boundary.BOTTOM else column.asc()
        stmt = self._scoped(item, exclude_id).order_by(order).limit(1)
        row = conn.execute(stmt).mappings().first()
        return Item.from_row(row) if row is not None else None

    def bottom_position(self, conn: Connection, item: Item, *, exclude_id: Any = None) -> int:
        """Position of the bottom item, or ``top - 1`` for an empty scope."""
        bottom = self.boundary(conn, item, Boundary.BOTTOM, exclude_id=exclude_id)
        if bottom is None:
            return self._bound.top - 1
        return int(bottom[self._bound.name])

    # ------------------------------------------------------------------
    # Neighbours
    # ------------------------------------------------------------------

    def items_above(self, conn: Connection, item: Item, limit: int | None = None) -> list[Item]:
        """Items at or above *item*'s position, nearest first, excluding itself."""
        position = self._bound.position_of(item)
        if position is None:
            return []
        column = self._bound.column
        stmt = (
            self._scoped(item, self._bound.id_of(item))
            .where(column <= position)
            .order_by(column.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._items(conn, stmt)

    def items_below(self, conn: Connection, item: Item, limit: int | None = None) -> list[Item]:
        """Items at or below *item*'s position, nearest first, excluding itself."""
        position = self._bound.position_of(item)
        if position is None:
            return []
        column = self._bound.column
        stmt = (
            self._scoped(item, self._bound.id_of(item))
            .where(column >= position)
            .order_by(column.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._items(conn, stmt)

    def higher_item(self, conn: Connection, item: Item) -> Item | None:
        above = self.items_above(conn, item, 1)
        return above[0] if above else None

    def lower_item(self, conn: Connection, item: Item) -> Item | None:
        below = self.items_below(conn, item, 1)
        return below[0] if below else None

    def is_first(self, conn: Connection, item: Item) -> bool:
        return self._bound.in_list(item) and self.higher_item(conn, item) is None

    def is_last(self, conn: Connection, item: Item) -> bool:
        return self._bound.in_list(item) and self.lower_item(conn, item) is None

    # ------------------------------------------------------------------
    # Ranges
    # ------------------------------------------------------------------

    def range_count(
        self,
        conn: Connection,
        item: Item,
        low: int,
        high: int,
        *,
        exclude_id: Any = None,
    ) -> int:
        """Number of rows in *item*'s scope with ``low <= position <= high``."""
        column = self._bound.column
        stmt = select(func.count()).select_from(self._bound.table).where(
            self._bound.scope_condition(item), column >= low, column <= high
        )
        if exclude_id is not None:
            stmt = stmt.where(self._bound.pk != exclude_id)
        return int(conn.execute(stmt).scalar_one())

    def siblings(self, conn: Connection, item: Item) -> list[Item]:
        """Every positioned item of *item*'s scope, top first."""
        column = self._bound.column
        return self._items(conn, self._scoped(item).order_by(column.asc(), self._bound.pk.asc()))

    # ------------------------------------------------------------------
    # Row access
    # ------------------------------------------------------------------

    def fetch(self, conn: Connection, item_id: Any, *, lock: bool = False) -> Item:
        """Load one row by primary key, optionally locking it for update.

        Raises:
            ItemNotFound: If no such row exists.
        """
        table = self._bound.table
        stmt = select(table).where(self._bound.pk == item_id)
        if lock:
            stmt = stmt.with_for_update()
        row = conn.execute(stmt).mappings().first()
        if row is None:
            msg = f"No row in {table.name!r} with id {item_id!r}"
            raise ItemNotFound(msg, table=table.name, id=item_id)
        return Item.from_row(row)
