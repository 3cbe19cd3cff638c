"""Production environment configuration."""

import os

prod_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 1024,
    "lambda_timeout": 900,
    "log_retention_days": 90,
    "log_level": "INFO",
    "enable_xray_tracing": True,
    "removal_policy": "retain",
    "enable_point_in_time_recovery": True,
    "propagation_chunk_size": 9000,
    "propagation_row_limit": 10000,
    "propagation_trigger_batch_size": 200,
    "propagation_trigger_max_batching_window_seconds": 10,
    "propagation_trigger_retry_attempts": 3,
    "metrics_namespace": "OwnerSync/Propagation",
    "contacts_failed_alarm_threshold": 10,
    "tags": {
        "Environment": "prod",
        "Project": "OwnerSync",
        "Owner": "CrmPlatformTeam",
        "CostCenter": "Engineering",
    },
}
