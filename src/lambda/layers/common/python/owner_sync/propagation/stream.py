"""Translate DynamoDB stream events from the accounts table into owner change events."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from boto3.dynamodb.types import TypeDeserializer

from owner_sync.models import AccountRecord, OwnerChangeEvent
from owner_sync.utils.logger import get_logger

logger = get_logger(__name__)
_DESERIALIZER = TypeDeserializer()


def _deserialize_image(image: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not image:
        return {}
    return {key: _DESERIALIZER.deserialize(value) for key, value in image.items()}


def _to_account(image: Dict[str, Any]) -> Optional[AccountRecord]:
    account_id = image.get("account_id")
    if account_id is None or str(account_id).strip() == "":
        return None
    owner = image.get("owner_id")
    return AccountRecord(id=str(account_id), owner_id=str(owner) if owner is not None else None)


def parse_stream_event(event: Dict[str, Any]) -> OwnerChangeEvent:
    """Build an OwnerChangeEvent from MODIFY records carrying both images.

    Repeated updates of one account inside a batch collapse to the earliest
    old image and the latest new image.
    """
    old_by_id: Dict[str, AccountRecord] = {}
    new_by_id: Dict[str, AccountRecord] = {}
    skipped: List[str] = []

    for record in event.get("Records", []) or []:
        if record.get("eventName") != "MODIFY":
            continue
        stream_record = record.get("dynamodb") or {}
        new = _to_account(_deserialize_image(stream_record.get("NewImage")))
        old = _to_account(_deserialize_image(stream_record.get("OldImage")))
        if new is None or old is None:
            skipped.append(str(record.get("eventID") or ""))
            continue
        old_by_id.setdefault(old.id, old)
        new_by_id[new.id] = new

    if skipped:
        logger.warning("Skipped stream records without account images", extra={"event_ids": skipped})

    return OwnerChangeEvent.from_pairs(old_by_id, new_by_id)
