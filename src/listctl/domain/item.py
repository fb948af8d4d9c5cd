"""Item — a list record with a persisted snapshot and pending changes.

The ordering engine never talks to an ORM. It works on ``Item`` objects:
a plain attribute mapping plus the values last written to the store.
``changes()`` is the difference between the two, which is all the engine
needs to detect scope moves and explicit position writes.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any


class Item:
    """One row of an ordered table.

    Attributes:
        values: Current attribute values, including unsaved edits.
        persisted: Values as last read from or written to the store,
            or None for a record that has not been created yet.
        destroyed_by: Foreign key column through which an owner's
            deletion cascaded to this item, if any.
    """

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        *,
        persisted: Mapping[str, Any] | None = None,
        destroyed_by: str | None = None,
    ) -> None:
        self.values: dict[str, Any] = dict(values or {})
        self.persisted: dict[str, Any] | None = dict(persisted) if persisted is not None else None
        self.destroyed_by = destroyed_by

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Item:
        """Build a persisted item from a result mapping."""
        data = dict(row)
        return cls(data, persisted=data)

    def __getitem__(self, name: str) -> Any:
        return self.values.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.values[name] = value

    def __repr__(self) -> str:
        state = "new" if self.new_record else "persisted"
        return f"Item({self.values!r}, {state})"

    @property
    def new_record(self) -> bool:
        return self.persisted is None

    def was(self, name: str) -> Any:
        """Value of *name* as last persisted (None for new records)."""
        if self.persisted is None:
            return None
        return self.persisted.get(name)

    def changes(self) -> dict[str, tuple[Any, Any]]:
        """Pending edits as ``{name: (persisted, current)}``."""
        if self.persisted is None:
            return {name: (None, value) for name, value in self.values.items()}
        return {
            name: (self.persisted.get(name), value)
            for name, value in self.values.items()
            if self.persisted.get(name) != value
        }

    def changed(self, name: str) -> bool:
        return name in self.changes()

    def mark_persisted(self, **written: Any) -> None:
        """Record that *written* (or, without arguments, every value) now matches the store."""
        if self.persisted is None or not written:
            self.persisted = dict(self.values)
            return
        self.persisted.update(written)

    def refresh(self, row: Mapping[str, Any]) -> None:
        """Replace both current and persisted values with a fresh row."""
        self.values = dict(row)
        self.persisted = dict(row)

    @contextmanager
    def reverted(self) -> Iterator[dict[str, tuple[Any, Any]]]:
        """Temporarily roll pending edits back to their persisted values.

        Yields the snapshot of pending changes. The edits are restored on
        exit, whether or not the block raised.
        """
        pending = self.changes()
        for name, (old, _new) in pending.items():
            self.values[name] = old
        try:
            yield pending
        finally:
            for name, (_old, new) in pending.items():
                self.values[name] = new
