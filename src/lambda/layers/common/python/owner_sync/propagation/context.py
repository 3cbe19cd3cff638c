"""Per-invocation context passed through the propagation call chain."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass
class TransactionBudget:
    """Row ceiling shared by every write performed in one invocation."""

    row_limit: int
    rows_consumed: int = 0

    def remaining(self) -> int:
        return self.row_limit - self.rows_consumed

    def consume(self, rows: int) -> None:
        if rows < 0:
            raise ValueError("rows must be non-negative")
        self.rows_consumed += rows


@dataclass
class InvocationContext:
    """Context token for one top-level invocation.

    ``propagation_active`` replaces a module-level re-entrancy flag: a handler
    that finds it set while being called again with the same context returns
    without side effects.
    """

    budget: TransactionBudget
    propagation_active: bool = False
    correlation_id: Optional[str] = None

    @classmethod
    def fresh(cls, row_limit: int, *, correlation_id: Optional[str] = None) -> "InvocationContext":
        return cls(budget=TransactionBudget(row_limit=row_limit), correlation_id=correlation_id)

    @contextmanager
    def enter_propagation(self) -> Iterator["InvocationContext"]:
        self.propagation_active = True
        try:
            yield self
        finally:
            self.propagation_active = False
