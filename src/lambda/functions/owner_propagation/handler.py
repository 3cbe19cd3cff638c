"""DynamoDB stream trigger that propagates account owner changes to contacts."""

from __future__ import annotations

import traceback
from typing import Any, Dict

import boto3

from owner_sync.models import ErrorLogEntry, PropagationSettings
from owner_sync.propagation import (
    OPERATION,
    InvocationContext,
    OwnerPropagationHandler,
    parse_stream_event,
)
from owner_sync.propagation.metrics import publish_propagation_metrics
from owner_sync.stores import DynamoContactRepository, build_error_log_sink
from owner_sync.utils.logger import extract_correlation_id, get_logger


logger = get_logger(__name__)


def _build_handler(settings: PropagationSettings) -> OwnerPropagationHandler:
    dynamodb = boto3.resource("dynamodb")
    contacts = DynamoContactRepository(
        dynamodb.Table(settings.contacts_table),
        settings.contacts_account_index,
    )
    error_log = build_error_log_sink(settings.error_log_table, dynamodb)
    return OwnerPropagationHandler(contacts, error_log, chunk_size=settings.chunk_size)


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda entry point. Propagation failures are logged, never raised.

    Configuration errors (missing or non-integer settings) do raise, so the
    stream retries the batch once the deployment is fixed.
    """
    corr_id = extract_correlation_id(event, context)
    log = get_logger(__name__, correlation_id=corr_id) if corr_id else logger

    # Raises RuntimeError on bad configuration; nothing has been written yet.
    settings = PropagationSettings.load()
    handler = _build_handler(settings)
    invocation = InvocationContext.fresh(settings.row_limit, correlation_id=corr_id)

    try:
        change_event = parse_stream_event(event)
    except ValueError as exc:
        log.exception("Invalid account stream batch", extra={"record_count": len(event.get("Records", []) or [])})
        handler.error_log.write(
            [
                ErrorLogEntry(
                    object_type="Account",
                    operation=OPERATION,
                    message=f"Invalid account stream batch: {exc}",
                    status_code=type(exc).__name__,
                    stack_trace=traceback.format_exc(),
                )
            ]
        )
        return {"status": "INVALID_EVENT", "errors": 1}

    result = handler.handle(change_event, invocation)

    if settings.metrics_namespace:
        publish_propagation_metrics(
            result,
            settings.metrics_namespace,
            dimensions={"Environment": settings.environment},
        )

    summary = result.summary()
    log.info("Owner propagation finished", extra=summary)
    return summary
