"""JSON-lines logging for transit.

Modules log through :func:`get_logger` and attach structured data under
``extra_fields``::

    log = get_logger("transit.pipeline")
    log.info("File acquired", extra={"extra_fields": {"op": "acquire", "path": target}})

which is written as one JSON object per line::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "INFO",
     "logger": "transit.pipeline", "message": "File acquired",
     "op": "acquire", "path": "/var/uploads/tmp/photo.png"}

Structured fields pass through :func:`~transit.utils.redact.redact`
before serialisation, so a field named ``secret_key`` or ``authorization``
is masked even if a caller forgets to redact it.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from transit.utils.redact import redact


class StructuredFormatter(logging.Formatter):
    """Render a record as a single-line JSON object.

    Always present: ``ts`` (UTC, ISO-8601), ``level``, ``logger`` and
    ``message``.  ``extra_fields`` are merged in at the top level after
    redaction; ``exception`` and ``stack_info`` appear when set.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields = getattr(record, "extra_fields", None)
        if fields:
            entry.update(redact(fields))

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


_configured: set[str] = set()


def get_logger(
    name: str = "transit",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Return the logger *name* with a JSON handler attached.

    The handler is added on the first call for a name only; *level* and
    *stream* are ignored on later calls.  Records do not propagate to the
    root logger.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _configured.add(name)
    return logger
