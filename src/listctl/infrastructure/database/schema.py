"""Table reflection and schema defaults for ordered tables.

listctl does not own the application's schema. Tables are either passed
in by the caller or reflected from the live database by name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import MetaData, Table

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


def reflect_table(bind: Engine | Connection, name: str) -> Table:
    """Load the definition of table *name* from the database."""
    return Table(name, MetaData(), autoload_with=bind)


def default_position(table: Table, column: str) -> int | None:
    """Integer default declared for *column*, or None.

    Client-side scalar defaults take precedence over server defaults.
    Non-integer or callable defaults are ignored.
    """
    col = table.c[column]
    raw: object = None
    if col.default is not None and getattr(col.default, "is_scalar", False):
        raw = col.default.arg  # type: ignore[attr-defined]
    elif col.server_default is not None:
        raw = getattr(col.server_default, "arg", None)
        raw = getattr(raw, "text", raw)
    if raw is None:
        return None
    try:
        return int(str(raw).strip("'\" ()"))
    except ValueError:
        return None
