"""OrderingService — list reads and reorders for the CLI.

Each operation runs in one transaction. Engine failures roll that
transaction back and come out as ``ServiceResult(ok=False)`` with the
exception's code, so the list on disk is exactly as it was.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, NoSuchTableError

from listctl.domain.item import Item
from listctl.domain.types import MoveDirection
from listctl.infrastructure.catalog import UnknownList
from listctl.ordering.errors import OrderingError
from listctl.services.base import BaseService
from listctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import Connection

    from listctl.infrastructure.store import ItemStore
    from listctl.ordering.engine import ListOperationEngine

log = structlog.get_logger(__name__)


def _failure(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )


def _item_payload(item: Item) -> dict[str, Any]:
    return dict(item.values)


class OrderingService(BaseService):
    """Reorders items of configured lists."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def lists(self) -> ServiceResult:
        """Configured lists with their resolved update mode."""
        op = "lists"
        items: list[dict[str, Any]] = []
        for name in sorted(self._catalog.settings.lists):
            try:
                _store, ordered = self._catalog.open_list(name)
            except NoSuchTableError as exc:
                return _failure(op, "UNKNOWN_TABLE", f"Table not found: {exc}", list=name)
            bound = ordered.bound
            items.append(
                {
                    "name": name,
                    "table": bound.table.name,
                    "column": bound.name,
                    "scope": bound.scope.kind,
                    "top": bound.top,
                    "add_new_at": bound.config.add_new_at.value,
                    "mode": "sequential" if bound.sequential else "bulk",
                }
            )
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def show(self, list_name: str, scope: dict[str, Any] | None = None) -> ServiceResult:
        """Items of one scope of *list_name*, top first."""
        return self._run(
            "show",
            list_name,
            lambda store, ordered, conn: self._show(store, ordered, conn, scope or {}),
        )

    def insert(self, list_name: str, item_id: Any, position: int) -> ServiceResult:
        """Move (or add) an item to *position*, shifting the others."""

        def apply(
            store: ItemStore, ordered: ListOperationEngine, conn: Connection
        ) -> dict[str, Any]:
            item = store.get(conn, self._catalog.coerce(store, store.pk_name, item_id))
            ordered.insert_at(conn, item, position)
            return _item_payload(item)

        return self._run("insert", list_name, apply)

    def move(self, list_name: str, item_id: Any, direction: MoveDirection) -> ServiceResult:
        """Move an item to the top / bottom, or one step up / down."""

        def apply(
            store: ItemStore, ordered: ListOperationEngine, conn: Connection
        ) -> dict[str, Any]:
            item = store.get(conn, self._catalog.coerce(store, store.pk_name, item_id))
            actions = {
                MoveDirection.TOP: ordered.move_to_top,
                MoveDirection.BOTTOM: ordered.move_to_bottom,
                MoveDirection.UP: ordered.move_higher,
                MoveDirection.DOWN: ordered.move_lower,
            }
            actions[MoveDirection(direction)](conn, item)
            return _item_payload(item)

        return self._run("move", list_name, apply)

    def remove(self, list_name: str, item_id: Any) -> ServiceResult:
        """Take an item out of its list, closing the gap."""

        def apply(
            store: ItemStore, ordered: ListOperationEngine, conn: Connection
        ) -> dict[str, Any]:
            item = store.get(conn, self._catalog.coerce(store, store.pk_name, item_id))
            ordered.remove_from_list(conn, item)
            return _item_payload(item)

        return self._run("remove", list_name, apply)

    def check(self, list_name: str) -> ServiceResult:
        """Report scopes whose positions are not ``top .. top+n-1``."""
        return self._run("check", list_name, self._check)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        op: str,
        list_name: str,
        apply: Callable[[ItemStore, ListOperationEngine, Connection], dict[str, Any]],
    ) -> ServiceResult:
        with structlog.contextvars.bound_contextvars(list=list_name, op=op):
            try:
                store, ordered = self._catalog.open_list(list_name)
                with store.transaction() as conn:
                    data = apply(store, ordered, conn)
            except UnknownList:
                return _failure(op, "UNKNOWN_LIST", f"No list configured as {list_name!r}")
            except NoSuchTableError as exc:
                return _failure(op, "UNKNOWN_TABLE", f"Table not found: {exc}", list=list_name)
            except OrderingError as exc:
                log.debug("ordering.rolled_back", code=exc.code, reason=exc.message)
                return _failure(op, exc.code, exc.message, **exc.detail)
            except IntegrityError as exc:
                log.debug("ordering.rolled_back", code="CONSTRAINT_VIOLATION")
                return _failure(op, "CONSTRAINT_VIOLATION", str(exc.orig))
            log.debug("ordering.committed", column=ordered.bound.name)
        data = {"list": list_name, "column": ordered.bound.name, **data}
        return ServiceResult(ok=True, op=op, data=data)

    def _show(
        self,
        store: ItemStore,
        ordered: ListOperationEngine,
        conn: Connection,
        scope: dict[str, Any],
    ) -> dict[str, Any]:
        scope_item = Item({k: self._catalog.coerce(store, k, v) for k, v in scope.items()})
        siblings = ordered.queries.siblings(conn, scope_item)
        return {
            "scope": scope,
            "count": len(siblings),
            "items": [_item_payload(item) for item in siblings],
        }

    def _check(
        self, store: ItemStore, ordered: ListOperationEngine, conn: Connection
    ) -> dict[str, Any]:
        bound = ordered.bound
        attributes = bound.scope.attributes
        if attributes:
            stmt = (
                select(*(store.table.c[a] for a in attributes))
                .where(bound.column.is_not(None))
                .distinct()
            )
            keys = [dict(zip(attributes, row, strict=True)) for row in conn.execute(stmt)]
        else:
            keys = [{}]

        issues: list[dict[str, Any]] = []
        for key in keys:
            positions = [bound.position_of(i) for i in ordered.queries.siblings(conn, Item(key))]
            expected = list(range(bound.top, bound.top + len(positions)))
            if positions != expected:
                issues.append({"scope": key, "positions": positions, "expected": expected})
        return {"scopes": len(keys), "count": len(issues), "issues": issues}
