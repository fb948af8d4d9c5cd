"""structlog setup for listctl.

Every log line goes to stderr through one processor chain, so stdout
stays clean for ``--json`` results. That covers structlog loggers, the
stdlib loggers of the ordering modules, and SQLAlchemy's statement log
when ``[database] echo`` is set.

Each line carries:

- ``list`` and ``op``: bound by the service for the operation in
  progress (see :class:`listctl.services.ordering.OrderingService`).
- ``layer``: the listctl package that emitted it (``ordering``,
  ``infrastructure``, ``services`` ...), or ``sql`` for SQLAlchemy.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

SQL_LOGGER = "sqlalchemy.engine"


def add_layer(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Derive ``layer`` from the logger name set by ``add_logger_name``."""
    name = str(event_dict.get("logger", ""))
    if name.startswith("sqlalchemy"):
        event_dict["layer"] = "sql"
        return event_dict
    parts = name.split(".")
    if parts[0] == "listctl" and len(parts) > 1:
        event_dict["layer"] = parts[1]
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    log_sql: bool = False,
) -> None:
    """Route listctl and SQLAlchemy logging through structlog.

    Args:
        verbose: listctl loggers at DEBUG; otherwise WARNING.
        log_json: One JSON object per line instead of console output.
        log_sql: Emit every statement SQLAlchemy executes at INFO.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_layer,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("listctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger(SQL_LOGGER).setLevel(logging.INFO if log_sql else logging.WARNING)
