"""JSON logger utility shared by the owner propagation Lambda and core.

Emits one structured JSON line per record with environment and
correlation_id fields when available, plus any per-call ``extra`` fields
(account ids, counts, error codes) merged into the payload.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": record.created,
        }
        env = getattr(record, "environment", None) or os.environ.get("ENVIRONMENT")
        if env:
            payload["environment"] = env
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload or key == "environment":
                continue
            if value is None:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _Adapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Dict[str, Any]):  # type: ignore[override]
        extra = self.extra.copy() if isinstance(self.extra, dict) else {}
        if "extra" in kwargs and isinstance(kwargs["extra"], dict):
            extra.update(kwargs["extra"])  # merge per-call extras
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, correlation_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Return a JSON-formatted logger adapter with optional correlation_id."""
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        base.addHandler(handler)
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    base.setLevel(getattr(logging, level_name, logging.INFO))
    extras: Dict[str, Any] = {"environment": os.environ.get("ENVIRONMENT")}
    if correlation_id:
        extras["correlation_id"] = correlation_id
    return _Adapter(base, extras)


def extract_correlation_id(event: Optional[Dict[str, Any]], context: Any = None) -> Optional[str]:
    """Try to extract a correlation id from the event, falling back to the Lambda request id."""
    if isinstance(event, dict):
        for key in ("correlation_id", "CorrelationId", "request_id"):
            val = event.get(key)
            if isinstance(val, str) and val:
                return val
        records = event.get("Records")
        if isinstance(records, list) and records:
            first = records[0]
            event_id = first.get("eventID") if isinstance(first, dict) else None
            if isinstance(event_id, str) and event_id:
                return event_id
    request_id = getattr(context, "aws_request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return None
