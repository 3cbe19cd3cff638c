"""Observable outcome of one propagation pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from owner_sync.models import ErrorLogEntry


class PropagationStatus(str, Enum):
    NO_CHANGES = "NO_CHANGES"
    SKIPPED = "SKIPPED"
    SUCCESS = "SUCCESS"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"
    FAILED = "FAILED"


@dataclass
class PropagationResult:
    status: PropagationStatus = PropagationStatus.NO_CHANGES
    accounts_changed: int = 0
    contacts_fetched: int = 0
    contacts_staged: int = 0
    contacts_updated: int = 0
    contacts_failed: int = 0
    unprocessed: int = 0
    chunk_sizes: List[int] = field(default_factory=list)
    errors: List[ErrorLogEntry] = field(default_factory=list)

    def finalize(self) -> "PropagationResult":
        """Derive the terminal status from counters and collected errors."""
        if self.status in (PropagationStatus.SKIPPED, PropagationStatus.FAILED):
            return self
        if self.accounts_changed == 0:
            self.status = PropagationStatus.NO_CHANGES
        elif self.errors:
            self.status = PropagationStatus.PARTIAL_FAILURE
        else:
            self.status = PropagationStatus.SUCCESS
        return self

    def summary(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "accounts_changed": self.accounts_changed,
            "contacts_fetched": self.contacts_fetched,
            "contacts_staged": self.contacts_staged,
            "contacts_updated": self.contacts_updated,
            "contacts_failed": self.contacts_failed,
            "unprocessed": self.unprocessed,
            "chunks": list(self.chunk_sizes),
            "errors": len(self.errors),
        }
