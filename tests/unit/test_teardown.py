"""Tests for managed resource teardown."""

from __future__ import annotations

import pytest

from conftest import FakeClusterStore
from machine_remediation_operator.builders import build_managed_resources
from machine_remediation_operator.config import OperatorConfig
from machine_remediation_operator.resources import CRD, DEPLOYMENT, MACHINE_HEALTH_CHECK
from machine_remediation_operator.store import StoreError
from machine_remediation_operator.teardown import TeardownError, teardown

CRD_TEMPLATE = {
    "apiVersion": "apiextensions.k8s.io/v1",
    "kind": "CustomResourceDefinition",
    "metadata": {"name": "machinehealthchecks.machineremediation.kubevirt.io"},
}


@pytest.fixture
def managed():
    return build_managed_resources("mro", [CRD_TEMPLATE], OperatorConfig())


def populated_store(managed) -> FakeClusterStore:
    return FakeClusterStore([(resource.kind, resource.body) for resource in managed])


class TestTeardown:
    """Test cases for teardown."""

    def test_deletes_everything(self, managed):
        store = populated_store(managed)

        deleted = teardown(store, managed)

        assert deleted == 6
        assert store.objects == {}

    def test_delete_order(self, managed):
        """Test that policies go before deployments and CRDs go last."""
        store = populated_store(managed)

        teardown(store, managed)

        plurals = [plural for op, plural, _ in store.mutations if op == "delete"]
        assert plurals == [
            "machinehealthchecks",
            "machinedisruptionbudgets",
            "deployments",
            "deployments",
            "deployments",
            "customresourcedefinitions",
        ]

    def test_missing_resources_count_as_deleted(self, managed):
        store = FakeClusterStore([(resource.kind, resource.body) for resource in managed.deployments])

        assert teardown(store, managed) == 3
        assert teardown(store, managed) == 0

    def test_failure_still_attempts_remaining_deletes(self, managed):
        store = populated_store(managed)
        store.fail("delete", DEPLOYMENT, StoreError("500 Internal Server Error", status=500))

        with pytest.raises(TeardownError) as exc_info:
            teardown(store, managed)

        assert len(exc_info.value.failures) == 3
        assert "Deployment" in str(exc_info.value)
        assert store.list(CRD) == []
        assert store.list(MACHINE_HEALTH_CHECK) == []
        assert len(store.list(DEPLOYMENT)) == 3
