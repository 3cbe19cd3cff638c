"""Development environment configuration."""

import os

dev_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 512,
    "lambda_timeout": 300,
    "log_retention_days": 14,
    "log_level": "DEBUG",
    "enable_xray_tracing": True,
    "removal_policy": "destroy",
    "enable_point_in_time_recovery": False,
    # Propagation chunking: soft per-chunk ceiling and per-invocation row limit
    "propagation_chunk_size": 9000,
    "propagation_row_limit": 10000,
    # Accounts stream -> Lambda
    "propagation_trigger_batch_size": 100,
    "propagation_trigger_max_batching_window_seconds": 5,
    "propagation_trigger_retry_attempts": 2,
    "metrics_namespace": "OwnerSync/Propagation",
    "contacts_failed_alarm_threshold": 1,
    "tags": {
        "Environment": "dev",
        "Project": "OwnerSync",
        "Owner": "CrmPlatformTeam",
        "CostCenter": "Engineering",
    },
}
