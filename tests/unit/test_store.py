"""Tests for the Kubernetes-backed cluster store."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.exceptions import ApiException

from machine_remediation_operator.constants import FIELD_MANAGER
from machine_remediation_operator.resources import CRD, DEPLOYMENT, OPERATOR
from machine_remediation_operator.store import (
    ConflictError,
    KubernetesClusterStore,
    NotFoundError,
    StoreError,
    describe,
    get_k8s_client,
    translate_api_exception,
)


@pytest.fixture
def api() -> MagicMock:
    return MagicMock()


@pytest.fixture
def store(api) -> KubernetesClusterStore:
    return KubernetesClusterStore(api, request_timeout=7.0)


class TestTranslateApiException:
    """Test cases for ApiException translation."""

    def test_not_found(self):
        error = translate_api_exception(ApiException(status=404, reason="Not Found"), "get x")
        assert isinstance(error, NotFoundError)
        assert error.status == 404
        assert str(error) == "get x: 404 Not Found"

    def test_conflict(self):
        error = translate_api_exception(ApiException(status=409, reason="Conflict"), "update x")
        assert isinstance(error, ConflictError)

    def test_other(self):
        error = translate_api_exception(ApiException(status=500, reason="Internal Server Error"), "x")
        assert type(error) is StoreError
        assert error.status == 500


class TestDescribe:
    def test_namespaced(self):
        assert describe(DEPLOYMENT, "a", "ns") == "Deployment ns/a"

    def test_cluster_scoped(self):
        assert describe(CRD, "a.example.com") == "CustomResourceDefinition a.example.com"


class TestKubernetesClusterStore:
    """Test cases for KubernetesClusterStore."""

    def test_get_namespaced(self, store, api):
        api.get_namespaced_custom_object.return_value = {"metadata": {"name": "a"}}

        result = store.get(DEPLOYMENT, "a", "ns")

        assert result == {"metadata": {"name": "a"}}
        api.get_namespaced_custom_object.assert_called_once_with(
            group="apps", version="v1", plural="deployments", _request_timeout=7.0, namespace="ns", name="a"
        )

    def test_get_cluster_scoped(self, store, api):
        store.get(CRD, "a.example.com")

        api.get_cluster_custom_object.assert_called_once_with(
            group="apiextensions.k8s.io",
            version="v1",
            plural="customresourcedefinitions",
            _request_timeout=7.0,
            name="a.example.com",
        )

    def test_get_not_found(self, store, api):
        api.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(NotFoundError, match="Deployment ns/a"):
            store.get(DEPLOYMENT, "a", "ns")

    def test_list_namespaced(self, store, api):
        api.list_namespaced_custom_object.return_value = {"items": [{"metadata": {"name": "a"}}]}

        assert store.list(DEPLOYMENT, "ns") == [{"metadata": {"name": "a"}}]

    def test_list_all_namespaces(self, store, api):
        api.list_cluster_custom_object.return_value = {}

        assert store.list(DEPLOYMENT) == []
        api.list_cluster_custom_object.assert_called_once()

    def test_create_sets_field_manager(self, store, api):
        body = {"metadata": {"name": "a", "namespace": "ns"}}

        store.create(DEPLOYMENT, body)

        kwargs = api.create_namespaced_custom_object.call_args.kwargs
        assert kwargs["body"] is body
        assert kwargs["namespace"] == "ns"
        assert kwargs["field_manager"] == FIELD_MANAGER

    def test_create_cluster_scoped(self, store, api):
        store.create(CRD, {"metadata": {"name": "a.example.com"}})

        api.create_cluster_custom_object.assert_called_once()
        api.create_namespaced_custom_object.assert_not_called()

    def test_create_existing_conflicts(self, store, api):
        api.create_namespaced_custom_object.side_effect = ApiException(status=409, reason="AlreadyExists")

        with pytest.raises(ConflictError):
            store.create(DEPLOYMENT, {"metadata": {"name": "a", "namespace": "ns"}})

    def test_update_replaces(self, store, api):
        body = {"metadata": {"name": "mro", "namespace": "ns", "resourceVersion": "3"}}

        store.update(OPERATOR, body)

        kwargs = api.replace_namespaced_custom_object.call_args.kwargs
        assert kwargs["name"] == "mro"
        assert kwargs["body"] is body
        assert kwargs["plural"] == "machineremediationoperators"

    def test_update_status_sends_status_only(self, store, api):
        body = {"metadata": {"name": "mro", "namespace": "ns"}, "spec": {"x": 1}, "status": {"conditions": []}}

        store.update_status(OPERATOR, body)

        kwargs = api.patch_namespaced_custom_object_status.call_args.kwargs
        assert kwargs["body"] == {"status": {"conditions": []}}

    def test_delete(self, store, api):
        store.delete(DEPLOYMENT, "a", "ns")
        store.delete(CRD, "a.example.com")

        api.delete_namespaced_custom_object.assert_called_once()
        api.delete_cluster_custom_object.assert_called_once()

    def test_delete_not_found(self, store, api):
        api.delete_cluster_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(NotFoundError):
            store.delete(CRD, "a.example.com")

    def test_server_error(self, store, api):
        api.delete_namespaced_custom_object.side_effect = ApiException(status=500, reason="Internal Server Error")

        with pytest.raises(StoreError) as exc_info:
            store.delete(DEPLOYMENT, "a", "ns")

        assert exc_info.value.status == 500
        assert isinstance(exc_info.value.__cause__, ApiException)

    @patch("machine_remediation_operator.store.metrics")
    def test_records_api_metrics(self, mock_metrics, store, api):
        api.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(NotFoundError):
            store.get(DEPLOYMENT, "a", "ns")

        mock_metrics.api_call_total.labels.assert_called_once_with(
            api_type="k8s", operation="get_deployments", result="not_found"
        )
        mock_metrics.api_call_duration_seconds.labels.assert_called_once_with(
            api_type="k8s", operation="get_deployments"
        )


class TestGetK8sClient:
    """Test cases for client creation."""

    @patch("kubernetes.config.load_kube_config")
    @patch("kubernetes.config.load_incluster_config")
    def test_in_cluster(self, mock_incluster, mock_kubeconfig):
        get_k8s_client()

        mock_incluster.assert_called_once()
        mock_kubeconfig.assert_not_called()

    @patch("kubernetes.config.load_kube_config")
    @patch("kubernetes.config.load_incluster_config")
    def test_falls_back_to_kubeconfig(self, mock_incluster, mock_kubeconfig):
        from kubernetes import config

        mock_incluster.side_effect = config.ConfigException("not in cluster")

        get_k8s_client()

        mock_kubeconfig.assert_called_once()
