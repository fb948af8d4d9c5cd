"""Catalog — the configured lists of one database.

The Catalog is the single dependency injected into every service. It
owns the database engine and builds one :class:`ItemStore` per table on
first use, registering every configured list column of that table on
it. Update modes are resolved at that point and then kept for the
lifetime of the catalog.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from listctl.infrastructure.database.engine import create_db_engine
from listctl.infrastructure.store import ItemStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from listctl.config.models import ListConfig
    from listctl.config.settings import ListctlSettings
    from listctl.ordering.engine import ListOperationEngine

logger = logging.getLogger(__name__)


class UnknownList(KeyError):
    """No ``[lists.<name>]`` section with that name."""


class Catalog:
    """Database engine plus lazily opened stores for configured lists."""

    def __init__(self, settings: ListctlSettings, *, engine: Engine | None = None) -> None:
        self._settings = settings
        # SQL echo is routed through structlog by configure_logging, not create_engine.
        self._engine: Engine = engine or create_db_engine(settings.database.url)
        self._stores: dict[str, ItemStore] = {}

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def settings(self) -> ListctlSettings:
        return self._settings

    def config_for(self, list_name: str) -> ListConfig:
        """The configuration of *list_name*.

        Raises:
            UnknownList: If no such list is configured.
        """
        try:
            return self._settings.lists[list_name]
        except KeyError:
            raise UnknownList(list_name) from None

    def open_list(self, list_name: str) -> tuple[ItemStore, ListOperationEngine]:
        """Store and engine for *list_name*, reflecting its table on first use."""
        config = self.config_for(list_name)
        store = self._stores.get(config.table)
        if store is None:
            store = ItemStore.open(self._engine, config.table)
            for other in self._settings.lists.values():
                if other.table == config.table:
                    store.register(other)
            self._stores[config.table] = store
            logger.debug("Opened table %s with %d list(s)", config.table, len(store.lists))
        return store, store.list_for(config.column)

    def coerce(self, store: ItemStore, column: str, raw: Any) -> Any:
        """Convert a CLI string to the Python type of *column*."""
        if not isinstance(raw, str):
            return raw
        try:
            python_type = store.table.c[column].type.python_type
        except NotImplementedError:
            return raw
        if python_type is bool:
            return raw.lower() in ("1", "true", "yes")
        try:
            return python_type(raw)
        except (TypeError, ValueError):
            return raw

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
