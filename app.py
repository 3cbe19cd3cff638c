#!/usr/bin/env python3
"""
Owner Sync CDK App
Keeps contact owners aligned with their account's owner via a DynamoDB stream trigger.
"""

import aws_cdk as cdk

from infrastructure.core.shared_storage_stack import SharedStorageStack
from infrastructure.pipelines.owner_sync import OwnerPropagationStack
from infrastructure.config.environments import get_environment_config

app = cdk.App()

environment = app.node.try_get_context("environment") or "dev"
config = get_environment_config(environment)

cdk_env = cdk.Environment(account=config.get("account_id"), region=config.get("region", "ap-northeast-2"))

stack_prefix = f"OwnerSync-{environment}"

# Accounts (streamed), contacts and the error log
shared_storage_stack = SharedStorageStack(
    app,
    f"{stack_prefix}-Core-SharedStorage",
    environment=environment,
    config=config,
    env=cdk_env,
)

propagation_stack = OwnerPropagationStack(
    app,
    f"{stack_prefix}-Pipeline-OwnerPropagation",
    environment=environment,
    config=config,
    shared_storage_stack=shared_storage_stack,
    env=cdk_env,
)

propagation_stack.add_dependency(shared_storage_stack)

cdk.Tags.of(app).add("Environment", environment)
cdk.Tags.of(app).add("Platform", "OwnerSync")
cdk.Tags.of(app).add("ManagedBy", "CDK")
for key, value in (config.get("tags") or {}).items():
    if key != "Environment":
        cdk.Tags.of(app).add(key, value)

cdk.Tags.of(propagation_stack).add("PipelineType", "Propagation")

app.synth()
