"""Shared pytest fixtures and test helpers for listctl tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import Column, Index, Integer, MetaData, String, Table, event, select
from sqlalchemy.engine import Engine

from listctl.config.models import ListConfig
from listctl.domain.item import Item
from listctl.infrastructure.database.engine import create_db_engine
from listctl.infrastructure.store import ItemStore

metadata = MetaData()

# Plain list: no unique index, so shifts run as one bulk UPDATE.
todo_items = Table(
    "todo_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("todo_list_id", Integer),
    Column("position", Integer, nullable=True),
    Column("done", Integer, nullable=False, server_default="0"),
    Column("title", String(100)),
)

# Unique index on the position column: shifts must run row by row.
ranked_items = Table(
    "ranked_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("position", Integer, nullable=True),
    Column("title", String(100)),
    Index("ix_ranked_items_position", "position", unique=True),
)

# Position column with a schema default that means "not placed yet".
default_items = Table(
    "default_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("todo_list_id", Integer),
    Column("position", Integer, server_default="0"),
    Column("title", String(100)),
)

# Two ordered columns and a composite scope.
section_items = Table(
    "section_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("book_id", Integer),
    Column("chapter", Integer),
    Column("position", Integer, nullable=True),
    Column("priority", Integer, nullable=True),
    Column("title", String(100)),
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "lists.db"


@pytest.fixture
def db_engine(db_path: Path) -> Iterator[Engine]:
    """File-backed SQLite engine with all test tables created."""
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(db_engine: Engine) -> ItemStore:
    """todo_items ordered by ``position`` within each ``todo_list_id``."""
    s = ItemStore(db_engine, todo_items)
    s.register(ListConfig(table="todo_items", scope="todo_list"))
    return s


@pytest.fixture
def ranked_store(db_engine: Engine) -> ItemStore:
    """ranked_items over the whole table, sequential mode detected from the index."""
    s = ItemStore(db_engine, ranked_items)
    s.register(ListConfig(table="ranked_items"))
    return s


@pytest.fixture
def sql_log(db_engine: Engine) -> Iterator[list[tuple[str, Any]]]:
    """Every statement sent to the database while the fixture is active."""
    log: list[tuple[str, Any]] = []

    def record(_conn: Any, _cursor: Any, statement: str, parameters: Any, *_: Any) -> None:
        log.append((statement, parameters))

    event.listen(db_engine, "before_cursor_execute", record)
    try:
        yield log
    finally:
        event.remove(db_engine, "before_cursor_execute", record)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def add_items(store: ItemStore, count: int, *, prefix: str = "item", **values: Any) -> list[Item]:
    """Create *count* items named ``<prefix>-1`` .. ``<prefix>-<count>`` in one transaction."""
    items: list[Item] = []
    with store.transaction() as conn:
        for n in range(1, count + 1):
            items.append(store.save(conn, store.new(title=f"{prefix}-{n}", **values)))
    return items


def update_statements(log: list[tuple[str, Any]]) -> list[tuple[str, Any]]:
    """Only the UPDATE statements of a :func:`sql_log` capture."""
    return [(s, p) for s, p in log if s.lstrip().upper().startswith("UPDATE")]


def ordered_titles(store: ItemStore, column: str = "position", **where: Any) -> list[str]:
    """Titles of positioned rows matching *where*, top first."""
    table = store.table
    stmt = select(table.c.title).where(table.c[column].is_not(None))
    for key, value in where.items():
        stmt = stmt.where(table.c[key] == value)
    stmt = stmt.order_by(table.c[column], table.c.id)
    with store.engine.connect() as conn:
        return list(conn.execute(stmt).scalars())


def positions(store: ItemStore, column: str = "position", **where: Any) -> list[int]:
    """Positions of rows matching *where*, ascending."""
    table = store.table
    stmt = select(table.c[column]).where(table.c[column].is_not(None))
    for key, value in where.items():
        stmt = stmt.where(table.c[key] == value)
    with store.engine.connect() as conn:
        return sorted(conn.execute(stmt).scalars())


def position_by_title(store: ItemStore, title: str, column: str = "position") -> int | None:
    table = store.table
    stmt = select(table.c[column]).where(table.c.title == title)
    with store.engine.connect() as conn:
        return conn.execute(stmt).scalar_one()
