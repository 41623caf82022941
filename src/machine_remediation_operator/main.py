"""Main entry point for the Machine Remediation Operator."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import logging as structured_logging
from .config import OperatorConfig
from .handlers.operator import ObjectLocks
from .health import start_health_server
from .platform import InfrastructurePlatformOracle
from .reconciler import MachineRemediationOperatorReconciler
from .store import KubernetesClusterStore, get_k8s_client
from .tracing import initialize_tracing
from .utils.events import KopfEventRecorder

logger = logging.getLogger(__name__)


def create_reconciler(config: OperatorConfig) -> MachineRemediationOperatorReconciler:
    """Wire the reconciler to the cluster the process runs against."""
    store = KubernetesClusterStore(get_k8s_client(), request_timeout=config.request_timeout)
    return MachineRemediationOperatorReconciler(
        store=store,
        oracle=InfrastructurePlatformOracle(store),
        config=config,
        recorder=KopfEventRecorder(),
    )


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()
    initialize_tracing()

    config = OperatorConfig.from_env()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = config.request_timeout
    settings.execution.max_workers = 4

    memo.reconciler = create_reconciler(config)
    memo.object_locks = ObjectLocks()

    # Start metrics HTTP server with health check endpoints
    start_health_server(config.metrics_port, ready_check=config.crds_manifests_dir.is_dir)
    logger.info(f"Operator configured for namespace {config.namespace}, version {config.operator_version}")


def main() -> None:
    """Run the operator against the namespace of the managed components."""
    config = OperatorConfig.from_env()
    kopf.run(standalone=True, namespaces=[config.namespace])
