"""JSON line logging for the download server.

Every record becomes one JSON object on stdout. Request context that services
attach with ``extra=`` (the URL being processed, the artifact identifier, the
argument vector handed to yt-dlp) is lifted into top-level keys so a single
download can be followed across modules.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Keys callers may attach through ``extra=`` that are copied into the payload
CONTEXT_KEYS: tuple[str, ...] = ("url", "platform", "file_id", "path", "argv", "returncode")


class JsonFormatter(logging.Formatter):
    """Render records as JSON with download context fields.

    Notes
    -----
    - ``argv`` stays a list and ``returncode`` an int; other context values such as
      ``Path`` objects are stringified.
    - Context keys that a record does not carry are omitted rather than emitted as null.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "message": record.getMessage(),
            "name": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value if isinstance(value, (int, float, list)) else str(value)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(debug: bool) -> None:
    """Route all logging, uvicorn's included, through one stdout JSON handler.

    Parameters
    ----------
    debug: bool
        Log at DEBUG, which also shows every yt-dlp argument vector and uvicorn's
        access log.
    """

    level: int = logging.DEBUG if debug else logging.INFO
    handler: logging.Handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level if debug else logging.WARNING)
