"""Structured Logging — JSON log lines and a per-request access log.

Invariants:
    - Each line carries timestamp, level, logger, message
    - Only allow-listed extra fields are emitted; anything else on the record is dropped,
      so a stray password or token passed as `extra` never reaches the output
    - The access log records method, path, status, and duration; never headers or bodies
    - setup_logging is idempotent: calling it twice does not duplicate output

Design Decisions:
    - stdlib logging + a small formatter, configured once from the FastAPI lifespan
    - SQLAlchemy engine logging pinned to WARNING: statements carry bound parameters
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request

EXTRA_FIELDS = (
    "error_code", "path", "method", "status", "duration_ms",
    "user_id", "replay_id", "scope", "operation",
)

_HANDLER_NAME = "dotareplays"

access_logger = logging.getLogger("dotareplays.access")


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key))
            for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def log_requests(request: Request, call_next):
    """HTTP middleware: one access line per request."""
    started = time.perf_counter()
    response = await call_next(request)
    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return response
