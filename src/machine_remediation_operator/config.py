"""Runtime configuration for the Machine Remediation Operator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import NAMESPACE_MACHINE_API

DEFAULT_CRDS_MANIFESTS_DIR = Path(__file__).parent / "manifests" / "crds"


@dataclass(frozen=True)
class OperatorConfig:
    """Settings fixed for the lifetime of the operator process."""

    namespace: str = NAMESPACE_MACHINE_API
    operator_version: str = "latest"
    image_registry: str = "quay.io/kubevirt"
    crds_manifests_dir: Path = DEFAULT_CRDS_MANIFESTS_DIR
    desired_replicas: int = 1
    request_timeout: float = 30.0
    metrics_port: int = 8080

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build the configuration from environment variables.

        Environment Variables:
            OPERATOR_NAMESPACE: Namespace for managed components
            OPERATOR_VERSION: Default image tag for managed components
            IMAGE_REGISTRY: Default image registry
            CRDS_MANIFESTS_DIR: Directory holding CRD manifests
            DESIRED_REPLICAS: Replica count for every managed deployment
            K8S_REQUEST_TIMEOUT_SECONDS: Timeout for each Kubernetes API call
            METRICS_PORT: Port for metrics and health endpoints
        """
        replicas = int(os.getenv("DESIRED_REPLICAS", str(cls.desired_replicas)))
        if replicas < 1:
            raise ValueError(f"DESIRED_REPLICAS must be positive, got {replicas}")

        return cls(
            namespace=os.getenv("OPERATOR_NAMESPACE", cls.namespace),
            operator_version=os.getenv("OPERATOR_VERSION", cls.operator_version),
            image_registry=os.getenv("IMAGE_REGISTRY", cls.image_registry),
            crds_manifests_dir=Path(os.getenv("CRDS_MANIFESTS_DIR", str(DEFAULT_CRDS_MANIFESTS_DIR))),
            desired_replicas=replicas,
            request_timeout=float(os.getenv("K8S_REQUEST_TIMEOUT_SECONDS", str(cls.request_timeout))),
            metrics_port=int(os.getenv("METRICS_PORT", str(cls.metrics_port))),
        )
