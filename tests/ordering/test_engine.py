"""Tests for ListOperationEngine — insert, move, remove on one scope."""

from typing import Any

import pytest
from sqlalchemy.engine import Engine

from listctl.config.models import ListConfig
from listctl.infrastructure.store import ItemStore
from listctl.ordering.errors import InvalidTargetPosition
from tests.conftest import (
    add_items,
    ordered_titles,
    position_by_title,
    positions,
    todo_items,
    update_statements,
)


class TestInsertAt:
    def test_move_up(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().insert_at(conn, items[2], 1)
        assert ordered_titles(store, todo_list_id=1) == ["item-3", "item-1", "item-2"]
        assert positions(store, todo_list_id=1) == [1, 2, 3]
        assert items[2]["position"] == 1

    def test_move_down(self, store: ItemStore) -> None:
        items = add_items(store, 5, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().insert_at(conn, items[1], 5)
        assert ordered_titles(store, todo_list_id=1) == [
            "item-1",
            "item-3",
            "item-4",
            "item-5",
            "item-2",
        ]
        assert positions(store, todo_list_id=1) == [1, 2, 3, 4, 5]

    def test_same_position_writes_nothing(
        self, store: ItemStore, sql_log: list[tuple[str, Any]]
    ) -> None:
        items = add_items(store, 3, todo_list_id=1)
        sql_log.clear()
        with store.transaction() as conn:
            store.list_for().insert_at(conn, items[1], 2)
        assert update_statements(sql_log) == []

    def test_defaults_to_top(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().insert_at(conn, items[2])
        assert ordered_titles(store, todo_list_id=1) == ["item-3", "item-1", "item-2"]

    def test_new_record_only_assigns(self, store: ItemStore) -> None:
        add_items(store, 2, todo_list_id=1)
        item = store.new(title="fresh", todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().insert_at(conn, item, 1)
        assert item["position"] == 1
        assert item.new_record
        assert positions(store, todo_list_id=1) == [1, 2]

    def test_unpositioned_item_opens_a_slot(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.remove_from_list(conn, items[0])
        with store.transaction() as conn:
            ordered.insert_at(conn, items[0], 2)
        assert ordered_titles(store, todo_list_id=1) == ["item-2", "item-1", "item-3"]
        assert positions(store, todo_list_id=1) == [1, 2, 3]

    def test_unpositioned_item_can_go_one_past_bottom(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.remove_from_list(conn, items[0])
            ordered.insert_at(conn, items[0], 3)
        assert ordered_titles(store, todo_list_id=1) == ["item-2", "item-3", "item-1"]

    @pytest.mark.parametrize("target", [0, -1, 4, 10])
    def test_out_of_range_target_rejected(self, store: ItemStore, target: int) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with pytest.raises(InvalidTargetPosition) as exc_info, store.transaction() as conn:
            store.list_for().insert_at(conn, items[0], target)
        assert exc_info.value.detail == {"position": target, "top": 1, "upper": 3}
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-2", "item-3"]

    def test_stale_in_memory_copy_is_reloaded(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.insert_at(conn, items[2], 1)
        # items[0] still believes it sits at 1
        with store.transaction() as conn:
            ordered.insert_at(conn, items[0], 3)
        assert ordered_titles(store, todo_list_id=1) == ["item-3", "item-2", "item-1"]
        assert positions(store, todo_list_id=1) == [1, 2, 3]


class TestMoveToEnds:
    def test_move_to_top(self, store: ItemStore) -> None:
        items = add_items(store, 4, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().move_to_top(conn, items[2])
        assert ordered_titles(store, todo_list_id=1) == ["item-3", "item-1", "item-2", "item-4"]
        assert positions(store, todo_list_id=1) == [1, 2, 3, 4]

    def test_move_to_bottom(self, store: ItemStore) -> None:
        items = add_items(store, 4, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().move_to_bottom(conn, items[1])
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-3", "item-4", "item-2"]
        assert positions(store, todo_list_id=1) == [1, 2, 3, 4]

    def test_top_then_bottom(self, store: ItemStore) -> None:
        items = add_items(store, 4, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.move_to_top(conn, items[2])
            ordered.move_to_bottom(conn, items[2])
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-2", "item-4", "item-3"]
        assert position_by_title(store, "item-3") == 4

    def test_other_scopes_untouched(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        add_items(store, 3, prefix="other", todo_list_id=2)
        with store.transaction() as conn:
            store.list_for().move_to_top(conn, items[2])
        assert ordered_titles(store, todo_list_id=2) == ["other-1", "other-2", "other-3"]

    def test_unpositioned_item_ignored(self, store: ItemStore) -> None:
        items = add_items(store, 2, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.remove_from_list(conn, items[1])
            ordered.move_to_top(conn, items[1])
            ordered.move_to_bottom(conn, items[1])
        assert items[1]["position"] is None
        assert positions(store, todo_list_id=1) == [1]


class TestMoveOneStep:
    def test_move_higher(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().move_higher(conn, items[2])
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-3", "item-2"]

    def test_move_lower(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().move_lower(conn, items[0])
        assert ordered_titles(store, todo_list_id=1) == ["item-2", "item-1", "item-3"]

    def test_ends_do_not_move(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.move_higher(conn, items[0])
            ordered.move_lower(conn, items[2])
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-2", "item-3"]

    def test_increment_position_touches_one_row(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().increment_position(conn, items[2])
        assert positions(store, todo_list_id=1) == [1, 2, 4]

    def test_decrement_position_touches_one_row(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().decrement_position(conn, items[0])
        assert positions(store, todo_list_id=1) == [0, 2, 3]


class TestRemoveFromList:
    def test_closes_gap(self, store: ItemStore) -> None:
        items = add_items(store, 4, todo_list_id=1)
        with store.transaction() as conn:
            store.list_for().remove_from_list(conn, items[1])
        assert items[1]["position"] is None
        assert position_by_title(store, "item-2") is None
        assert ordered_titles(store, todo_list_id=1) == ["item-1", "item-3", "item-4"]
        assert positions(store, todo_list_id=1) == [1, 2, 3]

    def test_twice_is_noop(self, store: ItemStore) -> None:
        items = add_items(store, 3, todo_list_id=1)
        ordered = store.list_for()
        with store.transaction() as conn:
            ordered.remove_from_list(conn, items[0])
            ordered.remove_from_list(conn, items[0])
        assert positions(store, todo_list_id=1) == [1, 2]


class TestSequentialMode:
    def test_insert_at_both_directions(self, ranked_store: ItemStore) -> None:
        items = add_items(ranked_store, 5)
        ordered = ranked_store.list_for()
        with ranked_store.transaction() as conn:
            ordered.insert_at(conn, items[4], 2)
            ordered.insert_at(conn, items[0], 4)
        assert ordered_titles(ranked_store) == ["item-5", "item-2", "item-3", "item-1", "item-4"]
        assert positions(ranked_store) == [1, 2, 3, 4, 5]

    def test_move_to_ends(self, ranked_store: ItemStore) -> None:
        items = add_items(ranked_store, 4)
        ordered = ranked_store.list_for()
        with ranked_store.transaction() as conn:
            ordered.move_to_top(conn, items[2])
            ordered.move_to_bottom(conn, items[0])
        assert ordered_titles(ranked_store) == ["item-3", "item-2", "item-4", "item-1"]
        assert positions(ranked_store) == [1, 2, 3, 4]

    def test_swaps(self, ranked_store: ItemStore) -> None:
        items = add_items(ranked_store, 3)
        ordered = ranked_store.list_for()
        with ranked_store.transaction() as conn:
            ordered.move_higher(conn, items[2])
            ordered.move_lower(conn, items[0])
        assert ordered_titles(ranked_store) == ["item-3", "item-1", "item-2"]
        assert positions(ranked_store) == [1, 2, 3]

    def test_remove(self, ranked_store: ItemStore) -> None:
        items = add_items(ranked_store, 4)
        with ranked_store.transaction() as conn:
            ranked_store.list_for().remove_from_list(conn, items[0])
        assert ordered_titles(ranked_store) == ["item-2", "item-3", "item-4"]
        assert positions(ranked_store) == [1, 2, 3]


class TestContiguity:
    def test_positions_stay_dense_through_a_session(self, store: ItemStore) -> None:
        items = add_items(store, 6, todo_list_id=1)
        ordered = store.list_for()
        steps = [
            lambda conn: ordered.insert_at(conn, items[5], 1),
            lambda conn: ordered.move_lower(conn, items[0]),
            lambda conn: ordered.move_to_bottom(conn, items[2]),
            lambda conn: ordered.remove_from_list(conn, items[3]),
            lambda conn: ordered.insert_at(conn, items[3], 2),
            lambda conn: ordered.move_higher(conn, items[4]),
            lambda conn: ordered.move_to_top(conn, items[1]),
        ]
        for step in steps:
            with store.transaction() as conn:
                step(conn)
            assert positions(store, todo_list_id=1) == [1, 2, 3, 4, 5, 6]


class TestTopOffset:
    def test_zero_based_list(self, db_engine: Engine) -> None:
        s = ItemStore(db_engine, todo_items)
        ordered = s.register(ListConfig(table="todo_items", scope="todo_list", top=0))
        items = add_items(s, 3, todo_list_id=1)
        assert positions(s, todo_list_id=1) == [0, 1, 2]
        with s.transaction() as conn:
            ordered.move_to_top(conn, items[2])
        assert ordered_titles(s, todo_list_id=1) == ["item-3", "item-1", "item-2"]
        assert positions(s, todo_list_id=1) == [0, 1, 2]

    def test_repr(self, store: ItemStore, ranked_store: ItemStore) -> None:
        assert repr(store.list_for()) == "ListOperationEngine(todo_items.position, bulk)"
        assert "sequential" in repr(ranked_store.list_for())
