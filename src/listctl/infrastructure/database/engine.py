"""Database engine setup.

Any SQLAlchemy URL works; SQLite gets foreign keys switched on and WAL
journaling for file databases so readers are not blocked while a
reorder transaction is open.

SQLAlchemy Core (not ORM) is used because the engine only ever issues
scoped selects and arithmetic updates on one table at a time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url


def create_db_engine(url: str | Path) -> Engine:
    """Create an engine for *url* (a path is treated as a SQLite file)."""
    if isinstance(url, Path):
        url = f"sqlite:///{url}"
    engine = create_engine(url)

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        in_memory = parsed.database in (None, "", ":memory:")

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine
