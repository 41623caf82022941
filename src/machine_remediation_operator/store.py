"""Cluster store backed by the Kubernetes API server."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from kubernetes import client

from . import metrics
from .constants import FIELD_MANAGER
from .resources import ResourceKind


class StoreError(Exception):
    """Raised when a cluster store call fails."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""


class ConflictError(StoreError):
    """Raised on a write conflict or when creating an object that already exists."""


class ClusterStore(Protocol):
    """CRUD interface over typed cluster resources."""

    def get(self, kind: ResourceKind, name: str, namespace: str | None = None) -> dict[str, Any]:
        ...

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        ...

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def update_status(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def delete(self, kind: ResourceKind, name: str, namespace: str | None = None) -> None:
        ...


def translate_api_exception(error: client.exceptions.ApiException, description: str) -> StoreError:
    """Map an API exception onto the store error taxonomy."""
    message = f"{description}: {error.status} {error.reason}"
    if error.status == 404:
        return NotFoundError(message, status=error.status)
    if error.status == 409:
        return ConflictError(message, status=error.status)
    return StoreError(message, status=error.status)


def describe(kind: ResourceKind, name: str, namespace: str | None = None) -> str:
    """Return a human readable reference to an object."""
    if kind.namespaced:
        return f"{kind.kind} {namespace}/{name}"
    return f"{kind.kind} {name}"


class KubernetesClusterStore:
    """ClusterStore over CustomObjectsApi.

    CustomObjectsApi only builds REST paths from group/version/plural, so it
    serves built-in kinds such as apps/v1 deployments as well as custom
    resources, always exchanging plain dict bodies.
    """

    def __init__(self, api: client.CustomObjectsApi, request_timeout: float = 30.0):
        self.api = api
        self.request_timeout = request_timeout

    def _call(
        self,
        operation: str,
        kind: ResourceKind,
        description: str,
        api_method: Callable[..., Any],
        **kwargs: Any,
    ) -> Any:
        """Invoke an API method with metrics, a timeout and error translation."""
        op_name = f"{operation}_{kind.plural}"
        start_time = time.time()
        try:
            result = api_method(
                group=kind.group,
                version=kind.version,
                plural=kind.plural,
                _request_timeout=self.request_timeout,
                **kwargs,
            )
            metrics.api_call_total.labels(api_type="k8s", operation=op_name, result="success").inc()
            return result
        except client.exceptions.ApiException as e:
            result_label = "not_found" if e.status == 404 else "error"
            metrics.api_call_total.labels(api_type="k8s", operation=op_name, result=result_label).inc()
            raise translate_api_exception(e, f"{operation} {description}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=op_name).observe(duration)

    def get(self, kind: ResourceKind, name: str, namespace: str | None = None) -> dict[str, Any]:
        """Get a single object.

        Raises:
            NotFoundError: If the object does not exist
            StoreError: On any other API failure
        """
        description = describe(kind, name, namespace)
        if kind.namespaced:
            return self._call(
                "get", kind, description, self.api.get_namespaced_custom_object,
                namespace=namespace, name=name,
            )
        return self._call("get", kind, description, self.api.get_cluster_custom_object, name=name)

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        """List objects of a kind, optionally restricted to a namespace."""
        if kind.namespaced and namespace is not None:
            result = self._call(
                "list", kind, kind.plural, self.api.list_namespaced_custom_object, namespace=namespace
            )
        else:
            result = self._call("list", kind, kind.plural, self.api.list_cluster_custom_object)
        return result.get("items", [])

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object.

        Raises:
            ConflictError: If the object already exists
        """
        metadata = body["metadata"]
        description = describe(kind, metadata["name"], metadata.get("namespace"))
        if kind.namespaced:
            return self._call(
                "create", kind, description, self.api.create_namespaced_custom_object,
                namespace=metadata["namespace"], body=body, field_manager=FIELD_MANAGER,
            )
        return self._call(
            "create", kind, description, self.api.create_cluster_custom_object,
            body=body, field_manager=FIELD_MANAGER,
        )

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Replace an object.

        The body's resourceVersion makes the write conditional, so a stale
        body raises ConflictError instead of overwriting a newer object.
        """
        metadata = body["metadata"]
        description = describe(kind, metadata["name"], metadata.get("namespace"))
        if kind.namespaced:
            return self._call(
                "update", kind, description, self.api.replace_namespaced_custom_object,
                namespace=metadata["namespace"], name=metadata["name"], body=body,
                field_manager=FIELD_MANAGER,
            )
        return self._call(
            "update", kind, description, self.api.replace_cluster_custom_object,
            name=metadata["name"], body=body, field_manager=FIELD_MANAGER,
        )

    def update_status(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Write the status subresource of a namespaced object."""
        metadata = body["metadata"]
        description = describe(kind, metadata["name"], metadata.get("namespace"))
        return self._call(
            "update_status", kind, description, self.api.patch_namespaced_custom_object_status,
            namespace=metadata["namespace"], name=metadata["name"],
            body={"status": body.get("status", {})}, field_manager=FIELD_MANAGER,
        )

    def delete(self, kind: ResourceKind, name: str, namespace: str | None = None) -> None:
        """Delete an object.

        Raises:
            NotFoundError: If the object is already gone
        """
        description = describe(kind, name, namespace)
        if kind.namespaced:
            self._call(
                "delete", kind, description, self.api.delete_namespaced_custom_object,
                namespace=namespace, name=name,
            )
        else:
            self._call("delete", kind, description, self.api.delete_cluster_custom_object, name=name)


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client.

    Returns:
        CustomObjectsApi instance
    """
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.CustomObjectsApi()
