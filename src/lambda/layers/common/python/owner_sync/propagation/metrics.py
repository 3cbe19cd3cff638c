"""CloudWatch metrics for propagation passes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from owner_sync.propagation.result import PropagationResult
from owner_sync.utils.logger import get_logger

logger = get_logger(__name__)


def publish_propagation_metrics(
    result: PropagationResult,
    namespace: str,
    *,
    cloudwatch: Optional[Any] = None,
    dimensions: Optional[Dict[str, str]] = None,
) -> bool:
    """Put per-pass contact counts to CloudWatch. Returns False on failure."""
    if not namespace:
        return False

    now = datetime.now(timezone.utc)
    dims = [{"Name": key, "Value": value} for key, value in (dimensions or {}).items() if value]
    counts = {
        "ContactsUpdated": result.contacts_updated,
        "ContactsFailed": result.contacts_failed,
        "ContactsUnprocessed": result.unprocessed,
    }
    metric_data = []
    for name, value in counts.items():
        datum: Dict[str, Any] = {"MetricName": name, "Value": float(value), "Unit": "Count", "Timestamp": now}
        if dims:
            datum["Dimensions"] = dims
        metric_data.append(datum)

    try:
        client = cloudwatch or boto3.client("cloudwatch")
        client.put_metric_data(Namespace=namespace, MetricData=metric_data)
    except ClientError as exc:
        logger.error(
            "Failed to put propagation metrics",
            extra={"namespace": namespace, "error_code": exc.response.get("Error", {}).get("Code")},
        )
        return False
    except Exception:  # pragma: no cover - credentials/endpoint failures
        logger.exception("Failed to put propagation metrics", extra={"namespace": namespace})
        return False
    return True
