"""Error log sinks.

The sink is chosen once when the Lambda starts up. ``build_error_log_sink``
describes the configured table and hands back a DynamoDB-backed sink only
when the table exists and accepts writes; otherwise entries go to the JSON
log stream through ``TraceErrorLogSink``. Neither sink raises from ``write``.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

import boto3
from botocore.exceptions import ClientError

from owner_sync.models import ErrorLogEntry
from owner_sync.utils.logger import get_logger

logger = get_logger(__name__)

_WRITABLE_STATUSES = frozenset({"ACTIVE", "UPDATING"})
# BatchWriteItem request ceiling
BATCH_WRITE_LIMIT = 25


class ErrorLogSink(Protocol):
    def write(self, entries: Sequence[ErrorLogEntry]) -> int:
        """Persist entries and return how many were stored durably."""
        ...


class TraceErrorLogSink:
    """Process-local fallback: entries are emitted as log lines, not persisted."""

    def __init__(self, log: Optional[Any] = None) -> None:
        self._log = log or logger

    def write(self, entries: Sequence[ErrorLogEntry]) -> int:
        for entry in entries:
            try:
                self._log.warning(
                    "Propagation error (trace only)",
                    extra={
                        "object_type": entry.object_type,
                        "operation": entry.operation,
                        "error_message": entry.message,
                        "record_id": entry.record_id,
                        "status_code": entry.status_code,
                        "error_timestamp": entry.timestamp.isoformat(),
                        "stack_trace": entry.stack_trace,
                    },
                )
            except Exception:
                continue
        return 0


class DynamoErrorLogSink:
    """Writes entries to the error log table in BatchWriteItem-sized slices.

    A slice that fails to flush is traced through the fallback; slices that
    were already flushed stay counted as persisted.
    """

    def __init__(self, table: Any, *, fallback: Optional[ErrorLogSink] = None) -> None:
        self.table = table
        self.fallback = fallback or TraceErrorLogSink()

    def write(self, entries: Sequence[ErrorLogEntry]) -> int:
        persisted = 0
        for start in range(0, len(entries), BATCH_WRITE_LIMIT):
            batch_entries = entries[start : start + BATCH_WRITE_LIMIT]
            try:
                with self.table.batch_writer() as batch:
                    for entry in batch_entries:
                        batch.put_item(Item=entry.to_item())
            except Exception:
                logger.exception(
                    "Failed to persist error log entries",
                    extra={"entry_count": len(batch_entries), "persisted": persisted},
                )
                self.fallback.write(batch_entries)
                continue
            persisted += len(batch_entries)
        return persisted


def build_error_log_sink(table_name: Optional[str], dynamodb: Optional[Any] = None) -> ErrorLogSink:
    """Return a DynamoDB sink when the log table exists and is writable."""
    if not table_name:
        logger.info("Error log table not configured; using trace sink")
        return TraceErrorLogSink()

    try:
        resource = dynamodb or boto3.resource("dynamodb")
        table = resource.Table(table_name)
        table.load()
        status = str(table.table_status or "")
    except ClientError as exc:
        error_code = exc.response.get("Error", {}).get("Code")
        logger.warning(
            "Error log table unavailable; using trace sink",
            extra={"table_name": table_name, "error_code": error_code},
        )
        return TraceErrorLogSink()
    except Exception:  # pragma: no cover - credentials/endpoint failures
        logger.exception("Failed to describe error log table; using trace sink", extra={"table_name": table_name})
        return TraceErrorLogSink()

    if status not in _WRITABLE_STATUSES:
        logger.warning(
            "Error log table not writable; using trace sink",
            extra={"table_name": table_name, "table_status": status},
        )
        return TraceErrorLogSink()

    return DynamoErrorLogSink(table)
