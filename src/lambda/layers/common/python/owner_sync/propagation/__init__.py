"""Account -> contact owner propagation core."""

from .context import InvocationContext, TransactionBudget
from .handler import (
    OPERATION,
    OwnerPropagationHandler,
    detect_owner_changes,
    plan_chunk_size,
    stage_owner_updates,
)
from .result import PropagationResult, PropagationStatus
from .stream import parse_stream_event

__all__ = [
    "InvocationContext",
    "TransactionBudget",
    "OPERATION",
    "OwnerPropagationHandler",
    "detect_owner_changes",
    "plan_chunk_size",
    "stage_owner_updates",
    "PropagationResult",
    "PropagationStatus",
    "parse_stream_event",
]
