"""Tests for Item — persisted snapshot and pending changes."""

import pytest

from listctl.domain.item import Item


class TestNewRecord:
    def test_no_snapshot_means_new(self) -> None:
        item = Item({"title": "a"})
        assert item.new_record is True
        assert item.was("title") is None

    def test_every_value_is_a_change(self) -> None:
        item = Item({"title": "a", "position": 3})
        assert item.changes() == {"title": (None, "a"), "position": (None, 3)}

    def test_missing_attribute_reads_none(self) -> None:
        assert Item()["position"] is None


class TestPersisted:
    def test_from_row_has_no_changes(self) -> None:
        item = Item.from_row({"id": 1, "position": 2})
        assert item.new_record is False
        assert item.changes() == {}

    def test_tracks_edits(self) -> None:
        item = Item.from_row({"id": 1, "position": 2, "todo_list_id": 1})
        item["todo_list_id"] = 5
        assert item.changed("todo_list_id")
        assert not item.changed("position")
        assert item.was("todo_list_id") == 1
        assert item.changes() == {"todo_list_id": (1, 5)}

    def test_mark_persisted_all(self) -> None:
        item = Item({"title": "a"})
        item.mark_persisted()
        assert item.new_record is False
        assert item.changes() == {}

    def test_mark_persisted_partial(self) -> None:
        item = Item.from_row({"id": 1, "position": 2, "todo_list_id": 1})
        item["position"] = 4
        item["todo_list_id"] = 2
        item.mark_persisted(position=4)
        assert item.changes() == {"todo_list_id": (1, 2)}

    def test_refresh_discards_edits(self) -> None:
        item = Item.from_row({"id": 1, "position": 2})
        item["position"] = 9
        item.refresh({"id": 1, "position": 3})
        assert item["position"] == 3
        assert item.changes() == {}


class TestReverted:
    def test_values_roll_back_inside_block(self) -> None:
        item = Item.from_row({"id": 1, "todo_list_id": 1, "position": 2})
        item["todo_list_id"] = 2
        with item.reverted() as pending:
            assert item["todo_list_id"] == 1
            assert pending == {"todo_list_id": (1, 2)}
        assert item["todo_list_id"] == 2

    def test_restores_after_error(self) -> None:
        item = Item.from_row({"id": 1, "todo_list_id": 1})
        item["todo_list_id"] = 2
        with pytest.raises(RuntimeError), item.reverted():
            raise RuntimeError("boom")
        assert item["todo_list_id"] == 2
