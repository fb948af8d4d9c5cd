"""Position writes — range shifts and single-row assignments.

Bulk mode issues one ``position = position + delta`` statement. Sequential
mode walks the matching rows one at a time, starting from the end that
moves into free space: ascending for ``delta < 0`` and descending for
``delta > 0``. Each row then lands on a value that has already been
vacated, so a unique index on the column is never violated mid-shift.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from listctl.ordering.errors import ConstraintViolation

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Connection

    from listctl.domain.item import Item
    from listctl.ordering.bound import BoundList

logger = logging.getLogger(__name__)


class PositionMutator:
    """Applies position changes for one bound list."""

    def __init__(self, bound: BoundList) -> None:
        self._bound = bound

    def shift_range_by(self, conn: Connection, delta: int, where: ColumnElement[bool]) -> int:
        """Add *delta* to the position of every row matching *where*.

        Returns the number of rows shifted.

        Raises:
            ConstraintViolation: If a write collides with a unique index.
        """
        if delta == 0:
            return 0
        try:
            if self._bound.sequential:
                count = self._shift_sequential(conn, delta, where)
            else:
                count = self._shift_bulk(conn, delta, where)
        except IntegrityError as exc:
            msg = (
                f"Shifting {self._bound.table.name}.{self._bound.name} by {delta:+d} "
                "violated a uniqueness constraint"
            )
            raise ConstraintViolation(
                msg, table=self._bound.table.name, column=self._bound.name, delta=delta
            ) from exc
        logger.debug(
            "Shifted %d row(s) of %s.%s by %+d (%s)",
            count,
            self._bound.table.name,
            self._bound.name,
            delta,
            "sequential" if self._bound.sequential else "bulk",
        )
        return count

    def increment_all(self, conn: Connection, where: ColumnElement[bool]) -> int:
        return self.shift_range_by(conn, 1, where)

    def decrement_all(self, conn: Connection, where: ColumnElement[bool]) -> int:
        return self.shift_range_by(conn, -1, where)

    def _shift_bulk(self, conn: Connection, delta: int, where: ColumnElement[bool]) -> int:
        column = self._bound.column
        result = conn.execute(
            update(self._bound.table).where(where).values({column: column + delta})
        )
        return int(result.rowcount or 0)

    def _shift_sequential(self, conn: Connection, delta: int, where: ColumnElement[bool]) -> int:
        column, pk = self._bound.column, self._bound.pk
        order = column.asc() if delta < 0 else column.desc()
        rows = conn.execute(select(pk, column).where(where).order_by(order)).all()
        for row_id, position in rows:
            conn.execute(
                update(self._bound.table).where(pk == row_id).values({column: position + delta})
            )
        return len(rows)

    def set_position(self, conn: Connection, item: Item, position: int | None) -> None:
        """Write *position* to *item*'s row and mark it persisted.

        Raises:
            ConstraintViolation: If the value is already taken under a unique index.
        """
        item_id: Any = self._bound.id_of(item)
        try:
            conn.execute(
                update(self._bound.table)
                .where(self._bound.pk == item_id)
                .values({self._bound.column: position})
            )
        except IntegrityError as exc:
            msg = f"Position {position} is already taken in {self._bound.table.name!r}"
            raise ConstraintViolation(
                msg, table=self._bound.table.name, column=self._bound.name, position=position
            ) from exc
        item[self._bound.name] = position
        item.mark_persisted(**{self._bound.name: position})
