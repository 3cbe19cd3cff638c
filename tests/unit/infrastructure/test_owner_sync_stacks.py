import json

import pytest
from aws_cdk import App
from aws_cdk.assertions import Match, Template

from infrastructure.core.shared_storage_stack import SharedStorageStack
from infrastructure.pipelines.owner_sync import propagation_stack as ps

pytestmark = [pytest.mark.unit, pytest.mark.infrastructure]


def _base_config(**overrides):
    cfg = {
        "log_retention_days": 14,
        "removal_policy": "destroy",
        "propagation_chunk_size": 9000,
        "propagation_row_limit": 10000,
        "propagation_trigger_batch_size": 100,
        "metrics_namespace": "OwnerSync/Propagation",
    }
    cfg.update(overrides)
    return cfg


def _synth(fake_python_constructs, cfg):
    fake_python_constructs(ps)
    app = App()
    shared = SharedStorageStack(app, "SharedStorage", environment="dev", config=cfg)
    stack = ps.OwnerPropagationStack(
        app,
        "OwnerPropagation",
        environment="dev",
        config=cfg,
        shared_storage_stack=shared,
    )
    return Template.from_stack(shared), Template.from_stack(stack)


def test_accounts_stream_and_contacts_index(fake_python_constructs):
    storage, _ = _synth(fake_python_constructs, _base_config())

    # 계정 테이블은 이전/이후 이미지를 스트림으로 내보내야 함
    storage.has_resource_properties(
        "AWS::DynamoDB::Table",
        {
            "TableName": "dev-accounts",
            "StreamSpecification": {"StreamViewType": "NEW_AND_OLD_IMAGES"},
        },
    )
    # 연락처 테이블은 account_id GSI로 조회
    storage.has_resource_properties(
        "AWS::DynamoDB::Table",
        {
            "TableName": "dev-contacts",
            "GlobalSecondaryIndexes": Match.array_with([Match.object_like({"IndexName": "account_id-index"})]),
        },
    )
    storage.has_resource_properties(
        "AWS::DynamoDB::Table",
        {"KeySchema": [{"AttributeName": "log_id", "KeyType": "HASH"}]},
    )


def test_function_environment_carries_chunk_settings(fake_python_constructs):
    _, template = _synth(fake_python_constructs, _base_config(propagation_chunk_size=500, propagation_row_limit=2000))

    template.has_resource_properties(
        "AWS::Lambda::Function",
        {
            "FunctionName": "dev-owner-propagation",
            "Environment": {
                "Variables": Match.object_like(
                    {
                        "CHUNK_SIZE": "500",
                        "ROW_LIMIT": "2000",
                        "CONTACTS_ACCOUNT_INDEX": "account_id-index",
                        "METRICS_NAMESPACE": "OwnerSync/Propagation",
                    }
                )
            },
        },
    )


def test_stream_trigger_filters_modify_events(fake_python_constructs):
    _, template = _synth(fake_python_constructs, _base_config())

    mappings = template.find_resources("AWS::Lambda::EventSourceMapping")
    assert len(mappings) == 1
    props = next(iter(mappings.values()))["Properties"]
    assert props["StartingPosition"] == "LATEST"
    assert props["BatchSize"] == 100
    patterns = [json.loads(f["Pattern"]) for f in props["FilterCriteria"]["Filters"]]
    assert patterns == [{"eventName": ["MODIFY"]}]


@pytest.mark.parametrize("namespace, expected_alarms", [("OwnerSync/Propagation", 2), ("", 1)])
def test_alarms_follow_metrics_namespace(fake_python_constructs, namespace, expected_alarms):
    _, template = _synth(fake_python_constructs, _base_config(metrics_namespace=namespace))

    template.resource_count_is("AWS::CloudWatch::Alarm", expected_alarms)


def test_environment_configs_carry_propagation_limits():
    from infrastructure.config.environments import get_environment_config

    for env in ("dev", "staging", "prod"):
        cfg = get_environment_config(env)
        assert cfg["propagation_chunk_size"] == 9000
        assert cfg["propagation_row_limit"] == 10000

    with pytest.raises(ValueError):
        get_environment_config("qa")
