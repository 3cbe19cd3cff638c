import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Iterator

import boto3
import pytest
from moto import mock_aws


# Ensure the 'owner_sync' layer is importable at collection time (module import stage)
_repo_root = Path(__file__).resolve().parents[1]
_repo_root_str = str(_repo_root)
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)
_layer_path = _repo_root / "src" / "lambda" / "layers" / "common" / "python"
_layer_str = str(_layer_path)
if _layer_str not in sys.path:
    sys.path.insert(0, _layer_str)

CONTACTS_TABLE = "dev-contacts"
ERROR_LOG_TABLE = "dev-owner-sync-error-log"
ACCOUNT_INDEX = "account_id-index"


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure default AWS region and dummy credentials for moto/boto3 clients."""
    monkeypatch.setenv("AWS_REGION", os.environ.get("AWS_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_DEFAULT_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")

    # Clear propagation settings to avoid cross-test contamination
    for name in (
        "CONTACTS_TABLE",
        "CONTACTS_ACCOUNT_INDEX",
        "ERROR_LOG_TABLE",
        "CHUNK_SIZE",
        "ROW_LIMIT",
        "METRICS_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def propagation_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Apply owner propagation Lambda environment variables."""

    def _apply(
        *,
        contacts_table: str = CONTACTS_TABLE,
        error_log_table: str = ERROR_LOG_TABLE,
        chunk_size: int = 9000,
        row_limit: int = 10000,
        metrics_namespace: str = "",
        environment: str = "dev",
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", environment)
        monkeypatch.setenv("CONTACTS_TABLE", contacts_table)
        monkeypatch.setenv("CONTACTS_ACCOUNT_INDEX", ACCOUNT_INDEX)
        monkeypatch.setenv("ERROR_LOG_TABLE", error_log_table)
        monkeypatch.setenv("CHUNK_SIZE", str(chunk_size))
        monkeypatch.setenv("ROW_LIMIT", str(row_limit))
        monkeypatch.setenv("METRICS_NAMESPACE", metrics_namespace)

    return _apply


@pytest.fixture
def dynamodb_tables() -> Iterator[SimpleNamespace]:
    """Provision contacts (with account GSI) and error log tables under moto."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name=os.environ.get("AWS_REGION", "us-east-1"))
        contacts = dynamodb.create_table(
            TableName=CONTACTS_TABLE,
            KeySchema=[{"AttributeName": "contact_id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "contact_id", "AttributeType": "S"},
                {"AttributeName": "account_id", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": ACCOUNT_INDEX,
                    "KeySchema": [
                        {"AttributeName": "account_id", "KeyType": "HASH"},
                        {"AttributeName": "contact_id", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        error_log = dynamodb.create_table(
            TableName=ERROR_LOG_TABLE,
            KeySchema=[{"AttributeName": "log_id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "log_id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield SimpleNamespace(dynamodb=dynamodb, contacts=contacts, error_log=error_log)


@pytest.fixture
def fake_python_constructs(monkeypatch: pytest.MonkeyPatch) -> Callable[[Any], None]:
    """Replace bundling PythonFunction/PythonLayerVersion with plain Lambda constructs."""
    from aws_cdk import Duration

    def _apply(target_module: Any) -> None:
        from aws_cdk import aws_lambda as lambda_

        def _fake_function(scope, id, **kwargs):
            return lambda_.Function(
                scope,
                id,
                function_name=kwargs.get("function_name"),
                runtime=lambda_.Runtime.PYTHON_3_12,
                handler="index.handler",
                code=lambda_.Code.from_inline("def handler(event, context): return {}"),
                memory_size=kwargs.get("memory_size", 128),
                timeout=kwargs.get("timeout", Duration.seconds(10)),
                log_retention=kwargs.get("log_retention"),
                tracing=kwargs.get("tracing"),
                layers=kwargs.get("layers", []),
                environment=kwargs.get("environment", {}),
            )

        def _fake_layer(scope, id, **kwargs):
            return lambda_.LayerVersion(
                scope,
                id,
                code=lambda_.Code.from_asset(str(_repo_root / "src" / "lambda" / "layers" / "common")),
                compatible_runtimes=kwargs.get("compatible_runtimes"),
                description=kwargs.get("description"),
            )

        monkeypatch.setattr(target_module, "PythonFunction", _fake_function, raising=False)
        monkeypatch.setattr(target_module, "PythonLayerVersion", _fake_layer, raising=False)

    return _apply
