"""Typed record models for owner propagation using Pydantic v2.

Account and contact snapshots, the per-batch owner change event, per-record
save outcomes and the error log entry all live in the Common Layer so the
Lambda entry point, the propagation core and offline tooling share one
contract.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountRecord(BaseModel):
    """Parent record; immutable within one handling pass."""

    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _require_id(cls, v: str) -> str:  # type: ignore[override]
        value = (v or "").strip()
        if not value:
            raise ValueError("account id must be non-empty")
        return value


class ContactRecord(BaseModel):
    """Child record whose owner_id follows its account's owner."""

    model_config = ConfigDict(frozen=True)

    id: str
    account_id: str
    owner_id: Optional[str] = None

    def with_owner(self, owner_id: Optional[str]) -> "ContactRecord":
        """Return a staged copy carrying the new owner."""
        return self.model_copy(update={"owner_id": owner_id})


class AccountChange(BaseModel):
    """Before/after snapshots of one account in an update batch."""

    model_config = ConfigDict(frozen=True)

    old: AccountRecord
    new: AccountRecord

    @model_validator(mode="after")
    def _same_identifier(self) -> "AccountChange":
        if self.old.id != self.new.id:
            raise ValueError(f"snapshot identifiers differ: old={self.old.id} new={self.new.id}")
        return self

    @property
    def owner_changed(self) -> bool:
        return self.new.owner_id != self.old.owner_id


class OwnerChangeEvent(BaseModel):
    """All updated accounts of one event batch, keyed by account id."""

    changes: Dict[str, AccountChange] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _keys_match_ids(self) -> "OwnerChangeEvent":
        for key, change in self.changes.items():
            if key != change.new.id:
                raise ValueError(f"change keyed by {key} carries account {change.new.id}")
        return self

    @classmethod
    def from_pairs(
        cls,
        old_by_id: Mapping[str, AccountRecord],
        new_by_id: Mapping[str, AccountRecord],
    ) -> "OwnerChangeEvent":
        """Pair before/after collections; every new record needs an old one."""
        changes: Dict[str, AccountChange] = {}
        for account_id, new in new_by_id.items():
            old = old_by_id.get(account_id)
            if old is None:
                raise ValueError(f"missing previous snapshot for account {account_id}")
            changes[account_id] = AccountChange(old=old, new=new)
        return cls(changes=changes)


class SaveResult(BaseModel):
    """Outcome of persisting a single record within a bulk update."""

    record_id: str
    success: bool
    status_code: Optional[str] = None
    message: Optional[str] = None


class ErrorLogEntry(BaseModel):
    """Durable failure record written to the error log store."""

    model_config = ConfigDict(frozen=True)

    object_type: str
    operation: str
    message: str
    record_id: Optional[str] = None
    status_code: Optional[str] = None
    stack_trace: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_item(self) -> Dict[str, Any]:
        """Render as a DynamoDB item; optional attributes are omitted when empty."""
        item: Dict[str, Any] = {
            "log_id": str(uuid.uuid4()),
            "object_type": self.object_type,
            "operation": self.operation,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.record_id:
            item["record_id"] = self.record_id
        if self.status_code:
            item["status_code"] = self.status_code
        if self.stack_trace:
            item["stack_trace"] = self.stack_trace
        return item
