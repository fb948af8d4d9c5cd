"""Tests for table reflection and schema defaults."""

import pytest
from sqlalchemy import Column, Integer, MetaData, Table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError

from listctl.infrastructure.database.schema import default_position, reflect_table


def _table(**column_kwargs: object) -> Table:
    return Table(
        "t",
        MetaData(),
        Column("id", Integer, primary_key=True),
        Column("position", Integer, **column_kwargs),
    )


class TestReflectTable:
    def test_reflects_columns(self, db_engine: Engine) -> None:
        table = reflect_table(db_engine, "todo_items")
        assert {"id", "todo_list_id", "position", "done", "title"} <= set(table.c.keys())

    def test_missing_table(self, db_engine: Engine) -> None:
        with pytest.raises(NoSuchTableError):
            reflect_table(db_engine, "nope")


class TestDefaultPosition:
    def test_no_default(self) -> None:
        assert default_position(_table(), "position") is None

    def test_scalar_default(self) -> None:
        assert default_position(_table(default=5), "position") == 5

    def test_server_default_string(self) -> None:
        assert default_position(_table(server_default="0"), "position") == 0

    def test_server_default_text(self) -> None:
        assert default_position(_table(server_default=text("'1'")), "position") == 1

    def test_callable_default_ignored(self) -> None:
        assert default_position(_table(default=lambda: 3), "position") is None

    def test_non_integer_default_ignored(self) -> None:
        assert default_position(_table(server_default="CURRENT_TIMESTAMP"), "position") is None

    def test_reflected_server_default(self, db_engine: Engine) -> None:
        table = reflect_table(db_engine, "default_items")
        assert default_position(table, "position") == 0
