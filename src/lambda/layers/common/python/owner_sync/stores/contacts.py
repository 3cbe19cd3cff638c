"""Contact table access: bulk fetch by account and best-effort owner updates."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from owner_sync.models import ContactRecord, SaveResult
from owner_sync.utils.logger import get_logger

logger = get_logger(__name__)


class ContactRepository(Protocol):
    def find_by_account_ids(self, account_ids: Iterable[str]) -> List[ContactRecord]:
        """Return every contact whose account_id is in ``account_ids``."""
        ...

    def update_owners(self, contacts: Sequence[ContactRecord]) -> List[SaveResult]:
        """Persist owner_id for each contact; one result per input, in order."""
        ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_contact(item: Dict[str, Any]) -> ContactRecord:
    owner = item.get("owner_id")
    return ContactRecord(
        id=str(item["contact_id"]),
        account_id=str(item["account_id"]),
        owner_id=str(owner) if owner is not None else None,
    )


class DynamoContactRepository:
    """Contacts stored in DynamoDB, keyed by contact_id with a GSI on account_id."""

    def __init__(self, table: Any, account_index: str) -> None:
        self.table = table
        self.account_index = account_index

    def _query_account(self, account_id: str) -> List[ContactRecord]:
        contacts: List[ContactRecord] = []
        kwargs: Dict[str, Any] = {
            "IndexName": self.account_index,
            "KeyConditionExpression": Key("account_id").eq(account_id),
        }
        while True:
            resp = self.table.query(**kwargs)
            for item in resp.get("Items", []):
                contacts.append(_to_contact(item))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return contacts
            kwargs["ExclusiveStartKey"] = last_key

    def find_by_account_ids(self, account_ids: Iterable[str]) -> List[ContactRecord]:
        ids = sorted(set(account_ids))
        contacts: List[ContactRecord] = []
        seen = set()
        for account_id in ids:
            for contact in self._query_account(account_id):
                if contact.id in seen:
                    continue
                seen.add(contact.id)
                contacts.append(contact)
        logger.debug(
            "Fetched related contacts",
            extra={"account_count": len(ids), "contact_count": len(contacts)},
        )
        return contacts

    def _update_one(self, contact: ContactRecord, now: str) -> SaveResult:
        if contact.owner_id is None:
            update_expression = "REMOVE owner_id SET last_modified_at = :now"
            values: Dict[str, Any] = {":now": now}
        else:
            update_expression = "SET owner_id = :owner, last_modified_at = :now"
            values = {":owner": contact.owner_id, ":now": now}
        try:
            self.table.update_item(
                Key={"contact_id": contact.id},
                UpdateExpression=update_expression,
                ConditionExpression="attribute_exists(contact_id)",
                ExpressionAttributeValues=values,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            return SaveResult(
                record_id=contact.id,
                success=False,
                status_code=error.get("Code"),
                message=error.get("Message") or str(exc),
            )
        return SaveResult(record_id=contact.id, success=True)

    def update_owners(self, contacts: Sequence[ContactRecord]) -> List[SaveResult]:
        now = _now_iso()
        return [self._update_one(contact, now) for contact in contacts]
