"""Structured JSON logging for notiondocs.

Every record is emitted as one JSON object per line so export runs can be
piped into a log aggregator or filtered with ``jq``::

    {"ts": "2026-10-17T09:12:44.031277+00:00", "level": "INFO",
     "logger": "notiondocs.exporter", "message": "page written",
     "page_id": "1f2e...", "path": "output/1f2e....md"}

Structured fields travel in ``extra={"extra_fields": {...}}``.  Loggers for
sub-modules (``notiondocs.transport``, ``notiondocs.renderer``...) are plain
children of the ``notiondocs`` logger and inherit its handler.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "notiondocs"


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  ``extra_fields`` are merged into the top-level object and
    exception / stack information is serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


# One handler per configured logger name so repeated calls stay idempotent.
_configured_loggers: set[str] = set()


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a notiondocs logger.

    Child names (``"notiondocs.exporter"``) get no handler of their own and
    propagate to the ``notiondocs`` logger, which :func:`configure_logging`
    equips with a :class:`StructuredFormatter` handler.
    """
    return logging.getLogger(name)


def configure_logging(
    level: int | str = logging.INFO,
    *,
    stream: Any | None = None,
) -> logging.Logger:
    """Attach a JSON handler to the ``notiondocs`` logger.

    Parameters
    ----------
    level:
        Minimum level, as an ``int`` or a case-insensitive name
        (``"DEBUG"``).
    stream:
        Output stream.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The root ``notiondocs`` logger.  Calling this again only updates the
        level; no duplicate handler is added.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    resolved_level = (
        logging.getLevelName(level.upper())
        if isinstance(level, str)
        else level
    )
    logger.setLevel(resolved_level)

    if ROOT_LOGGER not in _configured_loggers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        # Avoid double output when the application also configures root.
        logger.propagate = False
        _configured_loggers.add(ROOT_LOGGER)

    return logger
