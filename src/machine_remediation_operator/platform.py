"""Infrastructure platform lookup."""

from __future__ import annotations

from enum import Enum

from .constants import INFRASTRUCTURE_NAME
from .resources import INFRASTRUCTURE
from .store import ClusterStore, NotFoundError


class PlatformType(str, Enum):
    """Infrastructure platforms reported by the cluster Infrastructure object."""

    AWS = "AWS"
    AZURE = "Azure"
    BARE_METAL = "BareMetal"
    GCP = "GCP"
    IBM_CLOUD = "IBMCloud"
    LIBVIRT = "Libvirt"
    NONE = "None"
    OPENSTACK = "OpenStack"
    OVIRT = "oVirt"
    VSPHERE = "VSphere"


class PlatformError(Exception):
    """Raised when the cluster platform cannot be determined."""


def parse_platform(value: str | None) -> PlatformType:
    """Convert a platform string into a PlatformType.

    Raises:
        PlatformError: If the value is missing or not a known platform
    """
    if not value:
        raise PlatformError("Infrastructure object does not report a platform")
    try:
        return PlatformType(value)
    except ValueError as e:
        raise PlatformError(f"Unknown infrastructure platform: {value}") from e


class InfrastructurePlatformOracle:
    """Reads the platform type from the cluster-scoped Infrastructure object."""

    def __init__(self, store: ClusterStore):
        self.store = store

    def get_platform(self, cluster_name: str = INFRASTRUCTURE_NAME) -> PlatformType:
        """Return the platform the cluster runs on.

        Raises:
            PlatformError: If the Infrastructure object is missing or reports
                no known platform
            StoreError: If the lookup fails
        """
        try:
            infrastructure = self.store.get(INFRASTRUCTURE, cluster_name)
        except NotFoundError as e:
            raise PlatformError(f"Infrastructure {cluster_name} not found") from e

        status = infrastructure.get("status", {})
        # platformStatus supersedes the deprecated status.platform field
        platform = status.get("platformStatus", {}).get("type") or status.get("platform")
        return parse_platform(platform)
