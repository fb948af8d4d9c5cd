"""Schema introspection that decides how positions may be shifted.

A unique index on the position column makes a set-based
``position = position + 1`` fail halfway through on most databases,
because rows are checked one at a time while the update runs. Such
columns must be shifted row by row, in an order that never writes onto
a value another unprocessed row still holds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import inspect

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


def table_exists(conn: Connection, table_name: str) -> bool:
    """Whether *table_name* exists in the connected database."""
    return inspect(conn).has_table(table_name)


def has_unique_index(conn: Connection, table_name: str, column: str) -> bool:
    """Whether a unique index or constraint covers exactly *column*."""
    inspector = inspect(conn)
    for index in inspector.get_indexes(table_name):
        if index.get("unique") and list(index["column_names"]) == [column]:
            return True
    for constraint in inspector.get_unique_constraints(table_name):
        if list(constraint["column_names"]) == [column]:
            return True
    return False


def sequential_required(
    conn: Connection,
    table_name: str,
    column: str,
    override: bool | None = None,
) -> bool:
    """Decide between row-by-row and bulk shifting for *column*.

    An explicit *override* wins. Otherwise sequential updates are
    required when the table exists and a unique index covers the column.
    """
    if override is not None:
        return override
    required = table_exists(conn, table_name) and has_unique_index(conn, table_name, column)
    logger.debug(
        "Resolved update mode for %s.%s: %s",
        table_name,
        column,
        "sequential" if required else "bulk",
    )
    return required
