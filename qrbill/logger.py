from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

_EVENT_FIELDS = ("stage", "violation_count", "outcome", "line_count")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _EVENT_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    # Pillow traces every PNG chunk at DEBUG.
    logging.getLogger("PIL").setLevel(max(root.level, logging.INFO))
    formatter = JsonFormatter()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(formatter)


def log_bill_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    stage: str,
    violation_count: int | None = None,
    outcome: str | None = None,
    line_count: int | None = None,
) -> None:
    extra: dict[str, Any] = {"stage": stage}
    if violation_count is not None:
        extra["violation_count"] = violation_count
    if outcome is not None:
        extra["outcome"] = outcome
    if line_count is not None:
        extra["line_count"] = line_count
    logger.log(level, message, extra=extra)
