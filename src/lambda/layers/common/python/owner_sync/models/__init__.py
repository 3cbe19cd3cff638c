"""Models subpackage exposed via Common Layer."""

from .records import (
    AccountChange,
    AccountRecord,
    ContactRecord,
    ErrorLogEntry,
    OwnerChangeEvent,
    SaveResult,
)
from .settings import PropagationSettings

__all__ = [
    "AccountChange",
    "AccountRecord",
    "ContactRecord",
    "ErrorLogEntry",
    "OwnerChangeEvent",
    "SaveResult",
    "PropagationSettings",
]
