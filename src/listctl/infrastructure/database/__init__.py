"""Database engine setup, table reflection and constraint introspection via SQLAlchemy Core."""

from listctl.infrastructure.database.engine import create_db_engine
from listctl.infrastructure.database.introspection import (
    has_unique_index,
    sequential_required,
    table_exists,
)
from listctl.infrastructure.database.schema import default_position, reflect_table

__all__ = [
    "create_db_engine",
    "default_position",
    "has_unique_index",
    "reflect_table",
    "sequential_required",
    "table_exists",
]
