"""BaseService — foundation for listctl services.

Every service receives a :class:`Catalog` at construction time. The
catalog owns the database engine and the item stores of the configured
lists; services own their transaction boundaries via
``store.transaction()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from listctl.infrastructure.catalog import Catalog


class BaseService:
    """Base for service-layer classes.

    Usage::

        class OrderingService(BaseService):
            def remove(self, list_name: str, item_id: str) -> ServiceResult:
                store, ordered = self._catalog.open_list(list_name)
                with store.transaction() as conn:
                    ...
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
