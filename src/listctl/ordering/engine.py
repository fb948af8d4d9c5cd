"""ListOperationEngine — move, insert, remove and resync for one position column.

One engine is set up per ordered column. All operations take a
``Connection`` inside an active transaction; the caller owns commit and
rollback (e.g. ``with engine.begin() as conn``), so a failure anywhere
in a multi-row reorder leaves the list exactly as it was.

Operations on stored items lock the item's row and reload it first, so
they always start from the committed position rather than a stale copy.

The lifecycle hooks (``check_top_position``, ``place``,
``resync_scope``, ``check_position_write``, ``update_positions``,
``after_destroy``) are called by
:class:`listctl.infrastructure.store.ItemStore` around its writes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from listctl.domain.types import AddNewAt
from listctl.ordering.bound import BoundList
from listctl.ordering.errors import InvalidTargetPosition, StaleScopeRead
from listctl.ordering.mutator import PositionMutator
from listctl.ordering.queries import PositionQueryEngine

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Connection, Table

    from listctl.config.models import ListConfig
    from listctl.domain.item import Item

logger = logging.getLogger(__name__)


class ListOperationEngine:
    """Keeps one position column dense and gap-free within each scope."""

    def __init__(self, bound: BoundList) -> None:
        self.bound = bound
        self.queries = PositionQueryEngine(bound)
        self.mutator = PositionMutator(bound)

    @classmethod
    def setup(cls, conn: Connection, table: Table, config: ListConfig) -> ListOperationEngine:
        """Resolve *config* against *table* and build an engine for it."""
        return cls(BoundList.resolve(conn, table, config))

    def __repr__(self) -> str:
        mode = "sequential" if self.bound.sequential else "bulk"
        return f"ListOperationEngine({self.bound.table.name}.{self.bound.name}, {mode})"

    # ------------------------------------------------------------------
    # Range conditions
    # ------------------------------------------------------------------

    def _in_scope(self, item: Item, exclude_id: Any = None) -> ColumnElement[bool]:
        where = self.bound.scope_condition(item)
        if exclude_id is not None:
            where = where & (self.bound.pk != exclude_id)
        return where

    def _lock(self, conn: Connection, item: Item) -> None:
        item.refresh(self.queries.fetch(conn, self.bound.id_of(item), lock=True).values)

    def _park(self, conn: Connection, item: Item) -> None:
        """Move *item*'s row below the bottom with a spare slot in between.

        The gap leaves room for the rows about to be shifted down by one,
        and a positive value satisfies a ``>= 0`` check constraint.
        """
        temporary = self.queries.bottom_position(conn, item) + 2
        self.mutator.set_position(conn, item, temporary)

    def _validate_target(
        self, conn: Connection, item: Item, position: int, *, listed: bool = False
    ) -> None:
        """Reject targets that would leave a gap; a listed item cannot grow the list."""
        if listed:
            upper = self.queries.bottom_position(conn, item)
        else:
            item_id = self.bound.id_of(item)
            upper = self.queries.bottom_position(conn, item, exclude_id=item_id) + 1
        if not self.bound.top <= position <= upper:
            msg = f"Position {position} is outside [{self.bound.top}, {upper}]"
            raise InvalidTargetPosition(msg, position=position, top=self.bound.top, upper=upper)

    def increment_positions_on_higher_items(
        self, conn: Connection, item: Item, position: int | None = None
    ) -> int:
        """Shift every item above *position* (default: *item*'s own) down by one."""
        if position is None:
            position = self.bound.position_of(item)
            if position is None:
                return 0
        where = self._in_scope(item, self.bound.id_of(item)) & (self.bound.column < position)
        return self.mutator.increment_all(conn, where)

    def increment_positions_on_lower_items(
        self, conn: Connection, item: Item, position: int, exclude_id: Any = None
    ) -> int:
        """Shift every item at or below *position* down by one."""
        where = self._in_scope(item, exclude_id) & (self.bound.column >= position)
        return self.mutator.increment_all(conn, where)

    def decrement_positions_on_lower_items(
        self, conn: Connection, item: Item, position: int | None = None
    ) -> int:
        """Shift every item below *position* (default: *item*'s own) up by one."""
        if position is None:
            position = self.bound.position_of(item)
            if position is None:
                return 0
        where = self._in_scope(item, self.bound.id_of(item)) & (self.bound.column > position)
        return self.mutator.decrement_all(conn, where)

    def increment_positions_on_all_items(
        self, conn: Connection, item: Item, exclude_id: Any = None
    ) -> int:
        return self.mutator.increment_all(conn, self._in_scope(item, exclude_id))

    def shuffle_intermediate(
        self,
        conn: Connection,
        item: Item,
        old_position: int,
        new_position: int,
        exclude_id: Any = None,
    ) -> int:
        """Close the slot at *old_position* and open one at *new_position*.

        Moving 2 -> 5 shifts [3, 4, 5] to [2, 3, 4]; moving 5 -> 2 shifts
        [2, 3, 4] to [3, 4, 5].
        """
        if old_position == new_position:
            return 0
        column = self.bound.column
        where = self._in_scope(item, exclude_id)
        if old_position < new_position:
            where = where & (column > old_position) & (column <= new_position)
            return self.mutator.decrement_all(conn, where)
        where = where & (column >= new_position) & (column < old_position)
        return self.mutator.increment_all(conn, where)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def insert_at(self, conn: Connection, item: Item, position: int | None = None) -> None:
        """Put *item* at *position* (default: top), shifting others out of the way.

        A new record only gets the value assigned; the store applies it
        when the record is created.

        Raises:
            InvalidTargetPosition: If *position* would leave a gap or is smaller than ``top``.
        """
        if position is None:
            position = self.bound.top
        if item.new_record:
            item[self.bound.name] = position
            return

        self._lock(conn, item)
        item_id = self.bound.id_of(item)
        old_position = self.bound.position_of(item)
        if old_position == position:
            return
        self._validate_target(conn, item, position, listed=old_position is not None)

        if old_position is None:
            self.increment_positions_on_lower_items(conn, item, position)
        else:
            self._park(conn, item)
            self.shuffle_intermediate(conn, item, old_position, position, item_id)
        self.mutator.set_position(conn, item, position)
        logger.debug("Inserted %r at %d (was %s)", item_id, position, old_position)

    def move_to_top(self, conn: Connection, item: Item) -> None:
        self._lock(conn, item)
        if not self.bound.in_list(item):
            return
        old_position = self.bound.position_of(item)
        if self.bound.sequential:
            self._park(conn, item)
        self.increment_positions_on_higher_items(conn, item, old_position)
        self.mutator.set_position(conn, item, self.bound.top)

    def move_to_bottom(self, conn: Connection, item: Item) -> None:
        self._lock(conn, item)
        if not self.bound.in_list(item):
            return
        old_position = self.bound.position_of(item)
        if self.bound.sequential:
            self._park(conn, item)
        self.decrement_positions_on_lower_items(conn, item, old_position)
        bottom = self.queries.bottom_position(conn, item, exclude_id=self.bound.id_of(item))
        self.mutator.set_position(conn, item, bottom + 1)

    def move_higher(self, conn: Connection, item: Item) -> None:
        """Swap places with the item directly above, if there is one."""
        self._lock(conn, item)
        higher = self.queries.higher_item(conn, item)
        if higher is None:
            return
        if higher[self.bound.name] != item[self.bound.name]:
            self._swap(conn, higher, item)
        else:
            self.increment_position(conn, higher)
            self.decrement_position(conn, item)

    def move_lower(self, conn: Connection, item: Item) -> None:
        """Swap places with the item directly below, if there is one."""
        self._lock(conn, item)
        lower = self.queries.lower_item(conn, item)
        if lower is None:
            return
        if lower[self.bound.name] != item[self.bound.name]:
            self._swap(conn, lower, item)
        else:
            self.decrement_position(conn, lower)
            self.increment_position(conn, item)

    def _swap(self, conn: Connection, first: Item, second: Item) -> None:
        first_position = self.bound.position_of(first)
        second_position = self.bound.position_of(second)
        if self.bound.sequential:
            self._park(conn, second)
        self.mutator.set_position(conn, first, second_position)
        self.mutator.set_position(conn, second, first_position)

    def increment_position(self, conn: Connection, item: Item) -> None:
        """Move *item* one slot down without adjusting the rest of the list."""
        position = self.bound.position_of(item)
        if position is not None:
            self.mutator.set_position(conn, item, position + 1)

    def decrement_position(self, conn: Connection, item: Item) -> None:
        """Move *item* one slot up without adjusting the rest of the list."""
        position = self.bound.position_of(item)
        if position is not None:
            self.mutator.set_position(conn, item, position - 1)

    def remove_from_list(self, conn: Connection, item: Item) -> None:
        """Take *item* out of its list and close the gap it leaves."""
        self._lock(conn, item)
        position = self.bound.position_of(item)
        if position is None:
            return
        # Clear first so a unique index never sees the next item land on this row's value.
        self.mutator.set_position(conn, item, None)
        self.decrement_positions_on_lower_items(conn, item, position)

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def check_top_position(self, item: Item) -> None:
        """Clamp a position below ``top`` up to ``top``."""
        position = self.bound.position_of(item)
        if position is None or self.bound.is_default_position(item):
            return
        if position < self.bound.top:
            item[self.bound.name] = self.bound.top

    def place(self, conn: Connection, item: Item, *, scope_changed: bool = False) -> None:
        """Create-time placement: assign top/bottom or honor an explicit position.

        Raises:
            InvalidTargetPosition: If an explicit position is out of range.
        """
        add_new_at = self.bound.config.add_new_at
        if add_new_at is AddNewAt.NONE:
            return
        name = self.bound.name
        item_id = None if item.new_record else self.bound.id_of(item)

        if (
            not self.bound.in_list(item)
            or (scope_changed and not item.changed(name))
            or self.bound.is_default_position(item)
        ):
            if add_new_at is AddNewAt.TOP:
                self.increment_positions_on_all_items(conn, item, item_id)
                item[name] = self.bound.top
            else:
                item[name] = self.queries.bottom_position(conn, item, exclude_id=item_id) + 1
            logger.debug("Placed %r at %s of list (%d)", item_id, add_new_at.value, item[name])
            return

        position = int(item[name])
        self._validate_target(conn, item, position)
        self.increment_positions_on_lower_items(conn, item, position, item_id)

    def resync_scope(self, conn: Connection, item: Item) -> bool:
        """Pre-update hook: move *item* out of its old scope if the scope changed.

        Closes the gap in the old scope, then re-runs placement against the
        new one. Returns whether the scope changed, so the caller can thread
        the flag through the rest of the update.

        Raises:
            StaleScopeRead: If the stored scope differs from the item's snapshot.
        """
        if not self.bound.scope.changed(item):
            return False

        item_id = self.bound.id_of(item)
        stored = self.queries.fetch(conn, item_id, lock=True)
        for attribute in self.bound.scope.attributes:
            if stored[attribute] != item.was(attribute):
                msg = (
                    f"Scope attribute {attribute!r} of {item_id!r} changed in the store "
                    f"({item.was(attribute)!r} -> {stored[attribute]!r})"
                )
                raise StaleScopeRead(msg, id=item_id, attribute=attribute)

        with item.reverted():
            old_position = self.bound.position_of(stored)
            if old_position is not None:
                if self.bound.sequential:
                    self._park(conn, stored)
                self.decrement_positions_on_lower_items(conn, item, old_position)
        logger.debug("Scope of %r changed; left old list at %s", item_id, old_position)

        self.place(conn, item, scope_changed=True)
        return True

    def check_position_write(self, conn: Connection, item: Item) -> None:
        """Pre-update hook: reject a raw position write that would leave a gap.

        Only writes within an unchanged scope are checked; a scope change
        is placed by :meth:`resync_scope`.

        Raises:
            InvalidTargetPosition: If the new position is out of range.
        """
        name = self.bound.name
        if not item.changed(name) or self.bound.scope.changed(item):
            return
        position = self.bound.position_of(item)
        if position is None or self.bound.is_default_position(item):
            return
        self._validate_target(conn, item, position, listed=item.was(name) is not None)

    def update_positions(
        self,
        conn: Connection,
        item: Item,
        old_position: int | None,
        *,
        scope_changed: bool = False,
    ) -> None:
        """Post-update hook: close or shuffle around a raw position write.

        A position cleared to ``None`` closes the gap below *old_position*;
        a position landing on another row shifts the rows in between.
        """
        new_position = self.bound.position_of(item)
        item_id = self.bound.id_of(item)
        if new_position is None:
            if old_position is not None and not scope_changed:
                self.decrement_positions_on_lower_items(conn, item, old_position)
            return
        if self.queries.range_count(conn, item, new_position, new_position) <= 1:
            return
        if old_position is None:
            old_position = self.queries.bottom_position(conn, item, exclude_id=item_id) + 1
        self.shuffle_intermediate(conn, item, old_position, new_position, item_id)

    def after_destroy(self, conn: Connection, item: Item) -> None:
        """Close the gap left by a deleted item unless its scope owner was deleted."""
        if self.bound.scope.destroyed_via(item):
            return
        self.decrement_positions_on_lower_items(conn, item)
