"""Staging environment configuration."""

import os

staging_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 512,
    "lambda_timeout": 600,
    "log_retention_days": 30,
    "log_level": "INFO",
    "enable_xray_tracing": True,
    "removal_policy": "retain",
    "enable_point_in_time_recovery": True,
    "propagation_chunk_size": 9000,
    "propagation_row_limit": 10000,
    "propagation_trigger_batch_size": 100,
    "propagation_trigger_max_batching_window_seconds": 5,
    "propagation_trigger_retry_attempts": 2,
    "metrics_namespace": "OwnerSync/Propagation",
    "contacts_failed_alarm_threshold": 5,
    "tags": {
        "Environment": "staging",
        "Project": "OwnerSync",
        "Owner": "CrmPlatformTeam",
        "CostCenter": "Engineering",
    },
}
