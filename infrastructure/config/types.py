"""Typed configuration contracts for environment-specific settings."""

from __future__ import annotations

from typing import Dict, NotRequired, Required, TypedDict


class EnvironmentConfig(TypedDict, total=False):
    """Strongly-typed environment configuration contract."""

    region: Required[str]
    account_id: NotRequired[str | None]

    lambda_memory: NotRequired[int]
    lambda_timeout: NotRequired[int]
    log_retention_days: NotRequired[int]
    log_level: NotRequired[str]
    enable_xray_tracing: NotRequired[bool]

    removal_policy: NotRequired[str]
    enable_point_in_time_recovery: NotRequired[bool]

    accounts_table_name: NotRequired[str]
    contacts_table_name: NotRequired[str]
    error_log_table_name: NotRequired[str]

    propagation_chunk_size: NotRequired[int]
    propagation_row_limit: NotRequired[int]
    propagation_trigger_batch_size: NotRequired[int]
    propagation_trigger_max_batching_window_seconds: NotRequired[int]
    propagation_trigger_retry_attempts: NotRequired[int]

    metrics_namespace: NotRequired[str]
    contacts_failed_alarm_threshold: NotRequired[float]

    tags: NotRequired[Dict[str, str]]
