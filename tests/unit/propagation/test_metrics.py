from __future__ import annotations

import pytest

from owner_sync.propagation import PropagationResult
from owner_sync.propagation.metrics import publish_propagation_metrics
from tests.fixtures.clients import CloudWatchStub

pytestmark = [pytest.mark.unit]


def test_publishes_contact_counts_with_dimensions() -> None:
    """
    Given: 갱신/실패/미처리 건수가 있는 결과
    When: 메트릭 발행
    Then: 세 개의 Count 메트릭과 Environment 차원 전송
    """
    stub = CloudWatchStub()
    result = PropagationResult(contacts_updated=10, contacts_failed=2, unprocessed=5)

    ok = publish_propagation_metrics(result, "OwnerSync/Propagation", cloudwatch=stub, dimensions={"Environment": "dev"})

    assert ok is True
    call = stub.metrics[0]
    assert call["Namespace"] == "OwnerSync/Propagation"
    values = {d["MetricName"]: d["Value"] for d in call["MetricData"]}
    assert values == {"ContactsUpdated": 10.0, "ContactsFailed": 2.0, "ContactsUnprocessed": 5.0}
    assert all(d["Unit"] == "Count" for d in call["MetricData"])
    assert call["MetricData"][0]["Dimensions"] == [{"Name": "Environment", "Value": "dev"}]


def test_empty_namespace_disables_publishing() -> None:
    stub = CloudWatchStub()
    assert publish_propagation_metrics(PropagationResult(), "", cloudwatch=stub) is False
    assert stub.metrics == []


def test_put_failure_returns_false() -> None:
    assert publish_propagation_metrics(PropagationResult(), "ns", cloudwatch=CloudWatchStub(should_fail=True)) is False
