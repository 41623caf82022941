"""Descriptors for the Kubernetes resource kinds the operator works with."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    API_GROUP,
    API_VERSION,
    KIND_CRD,
    KIND_DEPLOYMENT,
    KIND_INFRASTRUCTURE,
    KIND_MACHINE_DISRUPTION_BUDGET,
    KIND_MACHINE_HEALTH_CHECK,
    KIND_OPERATOR,
    PLURAL_OPERATOR,
)


@dataclass(frozen=True)
class ResourceKind:
    """Addressing information for one resource kind.

    The store builds request paths from these fields, so any group/version
    served by the API server can be handled without registering model types.
    """

    group: str
    version: str
    plural: str
    kind: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        """Return the apiVersion string used in object bodies."""
        return f"{self.group}/{self.version}" if self.group else self.version


OPERATOR = ResourceKind(API_GROUP, API_VERSION, PLURAL_OPERATOR, KIND_OPERATOR)
DEPLOYMENT = ResourceKind("apps", "v1", "deployments", KIND_DEPLOYMENT)
CRD = ResourceKind(
    "apiextensions.k8s.io", "v1", "customresourcedefinitions", KIND_CRD, namespaced=False
)
MACHINE_HEALTH_CHECK = ResourceKind(
    API_GROUP, API_VERSION, "machinehealthchecks", KIND_MACHINE_HEALTH_CHECK
)
MACHINE_DISRUPTION_BUDGET = ResourceKind(
    API_GROUP, API_VERSION, "machinedisruptionbudgets", KIND_MACHINE_DISRUPTION_BUDGET
)
INFRASTRUCTURE = ResourceKind(
    "config.openshift.io", "v1", "infrastructures", KIND_INFRASTRUCTURE, namespaced=False
)
