"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import MagicMock

import pytest

from machine_remediation_operator.config import OperatorConfig
from machine_remediation_operator.constants import (
    API_GROUP_VERSION,
    INFRASTRUCTURE_NAME,
    KIND_OPERATOR,
    NAMESPACE_MACHINE_API,
)
from machine_remediation_operator.platform import InfrastructurePlatformOracle, PlatformType
from machine_remediation_operator.reconciler import MachineRemediationOperatorReconciler
from machine_remediation_operator.resources import DEPLOYMENT, INFRASTRUCTURE, ResourceKind
from machine_remediation_operator.store import ConflictError, NotFoundError, describe

IMAGE_REGISTRY = "docker.io/test"
IMAGE_TAG = "test"


class FakeClusterStore:
    """In-memory ClusterStore behaving like the API server for plain CRUD.

    Updates honour resourceVersion, and an object marked for deletion is
    removed once its last finalizer is gone.
    """

    def __init__(self, objects: list[tuple[ResourceKind, dict[str, Any]]] | None = None):
        self.objects: dict[tuple[str, str | None, str], dict[str, Any]] = {}
        self.mutations: list[tuple[str, str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        # Plurals the API server does not serve yet, e.g. before a CRD is established
        self.unserved: set[str] = set()
        self._version = 0
        for kind, body in objects or []:
            self._put(kind, copy.deepcopy(body))

    def _key(self, kind: ResourceKind, name: str, namespace: str | None) -> tuple[str, str | None, str]:
        return (kind.plural, namespace if kind.namespaced else None, name)

    def _put(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self._version += 1
        metadata = body.setdefault("metadata", {})
        metadata["resourceVersion"] = str(self._version)
        metadata.setdefault("uid", f"uid-{metadata['name']}")
        body.setdefault("apiVersion", kind.api_version)
        body.setdefault("kind", kind.kind)
        self.objects[self._key(kind, metadata["name"], metadata.get("namespace"))] = body
        return copy.deepcopy(body)

    def _maybe_fail(self, operation: str, kind: ResourceKind) -> None:
        error = self.failures.get((operation, kind.plural))
        if error is not None:
            raise error

    def fail(self, operation: str, kind: ResourceKind, error: Exception) -> None:
        """Make every future call of an operation on a kind raise error."""
        self.failures[(operation, kind.plural)] = error

    def get(self, kind: ResourceKind, name: str, namespace: str | None = None) -> dict[str, Any]:
        self._maybe_fail("get", kind)
        key = self._key(kind, name, namespace)
        if key not in self.objects:
            raise NotFoundError(f"get {describe(kind, name, namespace)}: 404 Not Found", status=404)
        return copy.deepcopy(self.objects[key])

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        self._maybe_fail("list", kind)
        return [
            copy.deepcopy(body)
            for (plural, ns, _), body in sorted(self.objects.items())
            if plural == kind.plural and (namespace is None or ns == namespace)
        ]

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("create", kind)
        if kind.plural in self.unserved:
            raise NotFoundError("404 the server could not find the requested resource", status=404)
        metadata = body["metadata"]
        key = self._key(kind, metadata["name"], metadata.get("namespace"))
        if key in self.objects:
            raise ConflictError("409 AlreadyExists", status=409)
        self.mutations.append(("create", kind.plural, metadata["name"]))
        return self._put(kind, copy.deepcopy(body))

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("update", kind)
        metadata = body["metadata"]
        key = self._key(kind, metadata["name"], metadata.get("namespace"))
        if key not in self.objects:
            raise NotFoundError("404 Not Found", status=404)
        current = self.objects[key]
        if metadata.get("resourceVersion") not in (None, current["metadata"]["resourceVersion"]):
            raise ConflictError("409 Conflict", status=409)

        self.mutations.append(("update", kind.plural, metadata["name"]))
        updated = copy.deepcopy(body)
        # The status subresource is not writable through a plain update
        if "status" in current:
            updated["status"] = copy.deepcopy(current["status"])
        else:
            updated.pop("status", None)
        if updated["metadata"].get("deletionTimestamp") and not updated["metadata"].get("finalizers"):
            del self.objects[key]
            return updated
        return self._put(kind, updated)

    def update_status(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("update_status", kind)
        metadata = body["metadata"]
        key = self._key(kind, metadata["name"], metadata.get("namespace"))
        if key not in self.objects:
            raise NotFoundError("404 Not Found", status=404)
        self.mutations.append(("update_status", kind.plural, metadata["name"]))
        current = copy.deepcopy(self.objects[key])
        current["status"] = copy.deepcopy(body.get("status", {}))
        return self._put(kind, current)

    def delete(self, kind: ResourceKind, name: str, namespace: str | None = None) -> None:
        self._maybe_fail("delete", kind)
        key = self._key(kind, name, namespace)
        if key not in self.objects:
            raise NotFoundError(f"delete {describe(kind, name, namespace)}: 404 Not Found", status=404)
        self.mutations.append(("delete", kind.plural, name))
        del self.objects[key]

    def set_deployment_status(self, name: str, namespace: str, replicas: int, updated: int) -> None:
        """Simulate the deployment controller reporting replica counts."""
        body = self.objects[self._key(DEPLOYMENT, name, namespace)]
        body["status"] = {"replicas": replicas, "updatedReplicas": updated}


def make_operator_object(
    name: str = "mro",
    pull_policy: str = "Always",
    registry: str = IMAGE_REGISTRY,
    finalizers: list[str] | None = None,
) -> dict[str, Any]:
    """Create a MachineRemediationOperator body."""
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_OPERATOR,
        "metadata": {
            "name": name,
            "namespace": NAMESPACE_MACHINE_API,
            "finalizers": list(finalizers or []),
        },
        "spec": {
            "imagePullPolicy": pull_policy,
            "imageRegistry": registry,
        },
    }


def make_infrastructure(platform: PlatformType | str) -> dict[str, Any]:
    """Create the cluster Infrastructure object for a platform."""
    value = platform.value if isinstance(platform, PlatformType) else platform
    return {
        "apiVersion": INFRASTRUCTURE.api_version,
        "kind": INFRASTRUCTURE.kind,
        "metadata": {"name": INFRASTRUCTURE_NAME},
        "status": {
            "platform": value,
            "platformStatus": {"type": value},
        },
    }


@pytest.fixture
def config() -> OperatorConfig:
    """Operator configuration using the bundled CRD manifests."""
    return OperatorConfig(operator_version=IMAGE_TAG, desired_replicas=1)


@pytest.fixture
def recorder() -> MagicMock:
    return MagicMock()


@pytest.fixture
def make_reconciler(config: OperatorConfig, recorder: MagicMock):
    """Return a factory building a reconciler over a fake store."""

    def factory(*objects: tuple[ResourceKind, dict[str, Any]]) -> MachineRemediationOperatorReconciler:
        store = FakeClusterStore(list(objects))
        return MachineRemediationOperatorReconciler(
            store=store,
            oracle=InfrastructurePlatformOracle(store),
            config=config,
            recorder=recorder,
        )

    return factory
