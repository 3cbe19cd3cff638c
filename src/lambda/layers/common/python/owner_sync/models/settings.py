"""Environment settings for the owner propagation Lambda."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_CHUNK_SIZE = 9000
DEFAULT_ROW_LIMIT = 10000
DEFAULT_ACCOUNT_INDEX = "account_id-index"


def _required_env(name: str, default: Optional[str] = None) -> str:
    value = os.environ.get(name, default)
    if value is None or value == "":
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _int_env(name: str, default: int, *, minimum: int) -> int:
    raw = os.environ.get(name, "")
    try:
        value = int(raw) if raw.strip() else default
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from None
    return max(minimum, value)


@dataclass(frozen=True)
class PropagationSettings:
    environment: str
    contacts_table: str
    contacts_account_index: str
    error_log_table: str
    chunk_size: int
    row_limit: int
    metrics_namespace: str

    @staticmethod
    def load() -> "PropagationSettings":
        return PropagationSettings(
            environment=os.environ.get("ENVIRONMENT", ""),
            contacts_table=_required_env("CONTACTS_TABLE"),
            contacts_account_index=_required_env("CONTACTS_ACCOUNT_INDEX", DEFAULT_ACCOUNT_INDEX),
            error_log_table=os.environ.get("ERROR_LOG_TABLE", "").strip(),
            chunk_size=_int_env("CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1),
            row_limit=_int_env("ROW_LIMIT", DEFAULT_ROW_LIMIT, minimum=0),
            metrics_namespace=os.environ.get("METRICS_NAMESPACE", "").strip(),
        )
