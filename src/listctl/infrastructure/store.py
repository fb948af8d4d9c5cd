"""ItemStore — row persistence for one ordered table, with lifecycle hooks.

The store is the only writer of whole rows. Around each write it calls
the hooks of every registered list column, in this order:

- ``save`` of a new item: clamp → placement → INSERT.
- ``save`` of a stored item: clamp → scope resync or range check →
  UPDATE → gap close or collision shuffle.
- ``destroy``: reload → DELETE → close the gap (skipped for cascades).

The DB transaction is the caller's: pass a ``Connection`` from
:meth:`ItemStore.transaction` (or any ``engine.begin()``) so the row
write and every shift it triggers commit or roll back together.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update

from listctl.domain.item import Item
from listctl.infrastructure.database.schema import reflect_table
from listctl.ordering.engine import ListOperationEngine
from listctl.ordering.errors import ItemNotFound

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection, Table
    from sqlalchemy.engine import Engine

    from listctl.config.models import ListConfig

logger = logging.getLogger(__name__)


class ItemStore:
    """Loads, saves and destroys items of *table*, keeping its lists ordered.

    Usage::

        store = ItemStore(engine, todo_items)
        store.register(ListConfig(scope="todo_list"))
        with store.transaction() as conn:
            item = store.save(conn, store.new(title="Buy milk", todo_list_id=1))
            store.list_for("position").move_to_top(conn, item)
    """

    def __init__(self, engine: Engine, table: Table) -> None:
        self._engine = engine
        self._table = table
        self._lists: dict[str, ListOperationEngine] = {}
        self._hooks_enabled = True

    @classmethod
    def open(cls, engine: Engine, table_name: str) -> ItemStore:
        """Build a store over a table reflected from the database."""
        return cls(engine, reflect_table(engine, table_name))

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def table(self) -> Table:
        return self._table

    @property
    def lists(self) -> list[ListOperationEngine]:
        return list(self._lists.values())

    @property
    def pk_name(self) -> str:
        return next(iter(self._table.primary_key.columns)).name

    def register(self, config: ListConfig) -> ListOperationEngine:
        """Track one position column; its update mode is resolved here, once."""
        with self._engine.connect() as conn:
            ordered = ListOperationEngine.setup(conn, self._table, config)
        self._lists[config.column] = ordered
        logger.debug("Registered %r", ordered)
        return ordered

    def list_for(self, column: str = "position") -> ListOperationEngine:
        """The engine maintaining *column*.

        Raises:
            KeyError: If *column* was never registered.
        """
        return self._lists[column]

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Open a DB transaction; commit on success, roll back on any exception."""
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def no_update(self) -> Iterator[None]:
        """Suspend all ordering hooks for the enclosed saves and destroys."""
        previous = self._hooks_enabled
        self._hooks_enabled = False
        try:
            yield
        finally:
            self._hooks_enabled = previous

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def new(self, **values: Any) -> Item:
        """An unsaved item with *values*."""
        return Item(values)

    def get(self, conn: Connection, item_id: Any) -> Item:
        """Load one item by primary key.

        Raises:
            ItemNotFound: If no such row exists.
        """
        pk = self._table.c[self.pk_name]
        row = conn.execute(select(self._table).where(pk == item_id)).mappings().first()
        if row is None:
            msg = f"No row in {self._table.name!r} with id {item_id!r}"
            raise ItemNotFound(msg, table=self._table.name, id=item_id)
        return Item.from_row(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, conn: Connection, item: Item) -> Item:
        """Insert or update *item*, running the ordering hooks around the write."""
        hooks = self._hooks_enabled
        if hooks:
            for ordered in self._lists.values():
                ordered.check_top_position(item)

        if item.new_record:
            if hooks:
                for ordered in self._lists.values():
                    ordered.place(conn, item)
            values = {k: v for k, v in item.values.items() if v is not None or k != self.pk_name}
            result = conn.execute(insert(self._table).values(**values))
            if item[self.pk_name] is None and result.inserted_primary_key:
                item[self.pk_name] = result.inserted_primary_key[0]
            item.mark_persisted()
            return item

        previous = {name: item.was(name) for name in self._lists}
        moved = dict.fromkeys(self._lists, False)
        if hooks:
            for name, ordered in self._lists.items():
                moved[name] = ordered.resync_scope(conn, item)
                if not moved[name]:
                    ordered.check_position_write(conn, item)

        pk = self._table.c[self.pk_name]
        conn.execute(update(self._table).where(pk == item[self.pk_name]).values(**item.values))
        item.mark_persisted()

        if hooks:
            for name, ordered in self._lists.items():
                ordered.update_positions(conn, item, previous[name], scope_changed=moved[name])
        return item

    def destroy(self, conn: Connection, item: Item, *, via: str | None = None) -> None:
        """Delete *item* and close the gap it leaves in each of its lists.

        Args:
            via: Foreign key column through which the deletion of an owner
                cascaded to this item. Lists scoped by that key are left
                alone, since the whole list is going away.
        """
        if item.new_record:
            return
        if via is not None:
            item.destroyed_by = via
        hooks = self._hooks_enabled
        cascaded = all(o.bound.scope.destroyed_via(item) for o in self._lists.values())

        if hooks and not cascaded:
            item.refresh(self.get(conn, item[self.pk_name]).values)

        pk = self._table.c[self.pk_name]
        conn.execute(delete(self._table).where(pk == item[self.pk_name]))

        if hooks:
            for ordered in self._lists.values():
                ordered.after_destroy(conn, item)

    def move_within_scope(
        self,
        conn: Connection,
        item: Item,
        position: int | None = None,
        *,
        column: str = "position",
        **scope_values: Any,
    ) -> Item:
        """Reassign *item*'s scope attributes and save.

        Without *position* the item is appended to its new list (or put on
        top, per ``add_new_at``). With it, *position* is written to the
        list kept in *column*.

        Raises:
            KeyError: If *column* was never registered.
        """
        ordered = self.list_for(column)
        for name, value in scope_values.items():
            item[name] = value
        if position is not None:
            item[ordered.bound.name] = position
        return self.save(conn, item)
