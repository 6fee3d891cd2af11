"""Structured Logging — one JSON object per line with project, round and strategy context.

Invariants:
    - Every line has timestamp (record creation time, UTC), level, logger and message
    - Context passed through `extra=` is copied only for the keys in _CONTEXT_FIELDS
    - Japanese text is written as-is (ensure_ascii=False)
    - setup_logging replaces its own handler on repeated calls; it never stacks them
    - httpx, httpcore and anthropic loggers are capped at WARNING
"""

import json
import logging
from datetime import datetime, timezone

_CONTEXT_FIELDS = (
    "project_id", "round_number", "strategy", "contributed", "error_code",
    "attempt", "input_tokens", "output_tokens", "path",
)
_QUIET_LOGGERS = ("httpx", "httpcore", "anthropic")
_HANDLER_NAME = "fango"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the Fango handler on the root logger (called from the lifespan)."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
