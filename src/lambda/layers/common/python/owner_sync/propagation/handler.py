"""Propagate account owner changes to related contacts.

One pass runs these steps:

1. detect accounts whose owner changed between the old and new snapshot
2. skip entirely when a pass is already active on the invocation context
3. fetch every contact attached to a changed account
4. stage contacts whose owner differs from the account's new owner
5. write the staged contacts in chunks bounded by the soft chunk ceiling and
   by the rows still available in the invocation budget; error log rows the
   sink persists are charged to the same budget

Failures are turned into ``ErrorLogEntry`` records, written to the error log
sink and returned on the ``PropagationResult``. ``handle`` never raises: the
account update that triggered the pass has already succeeded and must stay
that way.
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from botocore.exceptions import ClientError

from owner_sync.models import AccountRecord, ContactRecord, ErrorLogEntry, OwnerChangeEvent
from owner_sync.models.settings import DEFAULT_CHUNK_SIZE
from owner_sync.propagation.context import InvocationContext, TransactionBudget
from owner_sync.propagation.result import PropagationResult, PropagationStatus
from owner_sync.stores.contacts import ContactRepository
from owner_sync.stores.error_log import ErrorLogSink
from owner_sync.utils.logger import get_logger

logger = get_logger(__name__)

OBJECT_TYPE = "Contact"
OPERATION = "updateRelatedContactOwners"
ROW_LIMIT_STATUS = "ROW_LIMIT_EXCEEDED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def detect_owner_changes(event: OwnerChangeEvent) -> Dict[str, AccountRecord]:
    """Map account id -> new snapshot for every account whose owner changed."""
    return {account_id: change.new for account_id, change in event.changes.items() if change.owner_changed}


def stage_owner_updates(
    contacts: Sequence[ContactRecord],
    accounts: Mapping[str, AccountRecord],
) -> List[ContactRecord]:
    """Return staged copies of contacts whose owner differs from their account's."""
    staged: List[ContactRecord] = []
    for contact in contacts:
        account = accounts.get(contact.account_id)
        if account is None or contact.owner_id == account.owner_id:
            continue
        staged.append(contact.with_owner(account.owner_id))
    return staged


def plan_chunk_size(soft_ceiling: int, remaining_capacity: int, records_left: int) -> int:
    return max(0, min(soft_ceiling, remaining_capacity, records_left))


class OwnerPropagationHandler:
    """Best-effort owner propagation from accounts to contacts."""

    def __init__(
        self,
        contacts: ContactRepository,
        error_log: ErrorLogSink,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.contacts = contacts
        self.error_log = error_log
        self.chunk_size = chunk_size
        self._clock = clock or _utcnow

    def handle(self, event: OwnerChangeEvent, context: InvocationContext) -> PropagationResult:
        changed = detect_owner_changes(event)
        result = PropagationResult(accounts_changed=len(changed))

        if context.propagation_active:
            logger.info(
                "Owner propagation already in progress; skipping nested invocation",
                extra={"correlation_id": context.correlation_id, "accounts_changed": len(changed)},
            )
            result.status = PropagationStatus.SKIPPED
            return result

        if not changed:
            return result.finalize()

        with context.enter_propagation():
            try:
                self._propagate(changed, context.budget, result)
            except Exception as exc:
                logger.exception("Unexpected owner propagation failure", extra={"correlation_id": context.correlation_id})
                self._record(result, context.budget, [self._entry_from_exception("Owner propagation failed", exc)])
                result.status = PropagationStatus.FAILED

        return result.finalize()

    def _propagate(
        self,
        changed: Dict[str, AccountRecord],
        budget: TransactionBudget,
        result: PropagationResult,
    ) -> None:
        try:
            contacts = self.contacts.find_by_account_ids(list(changed))
        except Exception as exc:
            logger.exception("Failed to fetch related contacts", extra={"account_count": len(changed)})
            self._record(result, budget, [self._entry_from_exception("Failed to fetch related contacts", exc)])
            result.status = PropagationStatus.FAILED
            return

        result.contacts_fetched = len(contacts)
        staged = stage_owner_updates(contacts, changed)
        result.contacts_staged = len(staged)
        if staged:
            self._update_in_chunks(staged, budget, result)

    def _update_in_chunks(
        self,
        staged: List[ContactRecord],
        budget: TransactionBudget,
        result: PropagationResult,
    ) -> None:
        total = len(staged)
        index = 0
        while index < total:
            left = total - index
            remaining = budget.remaining()
            if remaining <= 0:
                result.unprocessed = left
                logger.warning(
                    "Row limit reached; stopping owner propagation",
                    extra={"unprocessed": left, "rows_consumed": budget.rows_consumed},
                )
                self._record(
                    result,
                    budget,
                    [
                        self._entry(
                            f"Row limit of {budget.row_limit} reached; {left} contact owner updates were not processed",
                            status_code=ROW_LIMIT_STATUS,
                        )
                    ],
                )
                return

            size = plan_chunk_size(self.chunk_size, remaining, left)
            chunk = staged[index : index + size]
            index += size
            result.chunk_sizes.append(size)
            budget.consume(size)

            try:
                outcomes = self.contacts.update_owners(chunk)
            except Exception as exc:
                logger.exception("Bulk contact update failed", extra={"chunk_size": size})
                result.contacts_failed += size
                entry = self._entry_from_exception(f"Bulk update of {size} contacts failed", exc)
                self._record(result, budget, [entry])
                continue

            failures = [outcome for outcome in outcomes if not outcome.success]
            result.contacts_updated += len(outcomes) - len(failures)
            result.contacts_failed += len(failures)
            if failures:
                self._record(
                    result,
                    budget,
                    [
                        self._entry(
                            outcome.message or "Contact owner update failed",
                            record_id=outcome.record_id,
                            status_code=outcome.status_code,
                        )
                        for outcome in failures
                    ],
                )
            logger.info(
                "Submitted contact owner chunk",
                extra={"chunk_size": size, "failed": len(failures), "remaining_rows": budget.remaining()},
            )

    def _entry(
        self,
        message: str,
        *,
        record_id: Optional[str] = None,
        status_code: Optional[str] = None,
        stack_trace: Optional[str] = None,
    ) -> ErrorLogEntry:
        return ErrorLogEntry(
            object_type=OBJECT_TYPE,
            operation=OPERATION,
            message=message,
            record_id=record_id,
            status_code=status_code,
            stack_trace=stack_trace,
            timestamp=self._clock(),
        )

    def _entry_from_exception(self, prefix: str, exc: BaseException) -> ErrorLogEntry:
        status_code = type(exc).__name__
        if isinstance(exc, ClientError):
            status_code = exc.response.get("Error", {}).get("Code") or status_code
        return self._entry(
            f"{prefix}: {exc}",
            status_code=status_code,
            stack_trace="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )

    def _record(
        self,
        result: PropagationResult,
        budget: TransactionBudget,
        entries: List[ErrorLogEntry],
    ) -> None:
        """Collect entries on the result and charge persisted log rows to the budget."""
        result.errors.extend(entries)
        try:
            budget.consume(self.error_log.write(entries) or 0)
        except Exception:
            logger.exception("Error log sink raised", extra={"entry_count": len(entries)})
