"""Aggregation of component readiness into operator conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from .constants import (
    COND_AVAILABLE,
    REASON_AS_EXPECTED,
    REASON_DEPLOYING,
    REASON_RECONCILE_FAILED,
)
from .utils.conditions import is_condition_true, set_operator_conditions


@dataclass(frozen=True)
class AggregateStatus:
    """Result of aggregating component readiness."""

    conditions: list[dict[str, Any]]
    available: bool


def is_deployment_ready(deployment: dict[str, Any], desired_replicas: int) -> bool:
    """Return whether all desired replicas of a deployment are updated.

    Readiness compares observed counts against the fixed desired replica
    count, not against the deployment's own spec.
    """
    status = deployment.get("status") or {}
    replicas = status.get("replicas", 0)
    updated_replicas = status.get("updatedReplicas", 0)
    return updated_replicas == replicas == desired_replicas


def aggregate_status(
    conditions: list[dict[str, Any]],
    deployments: dict[str, dict[str, Any] | None],
    desired_replicas: int,
    error: Exception | None = None,
    pending: Sequence[str] = (),
) -> AggregateStatus:
    """Compute the operator conditions from observed component deployments.

    Args:
        conditions: Current conditions, used to preserve transition times
        deployments: Observed deployments keyed by name, None for a
            deployment that does not exist yet
        desired_replicas: Replica count every deployment must reach
        error: Error hit while applying or reading state, if any
        pending: Names of other resources that could not be created yet

    Returns:
        Aggregate status with all three conditions set
    """
    if error is not None:
        message = f"Failed to reconcile components: {error}"
        updated = set_operator_conditions(
            conditions,
            available=(False, REASON_RECONCILE_FAILED, message),
            progressing=(False, REASON_RECONCILE_FAILED, message),
            degraded=(True, REASON_RECONCILE_FAILED, message),
        )
        return AggregateStatus(conditions=updated, available=False)

    not_ready = [
        name
        for name, deployment in deployments.items()
        if deployment is None or not is_deployment_ready(deployment, desired_replicas)
    ]
    not_ready.extend(pending)

    if not not_ready:
        message = "All components are available"
        updated = set_operator_conditions(
            conditions,
            available=(True, REASON_AS_EXPECTED, message),
            progressing=(False, REASON_AS_EXPECTED, message),
            degraded=(False, REASON_AS_EXPECTED, message),
        )
        return AggregateStatus(conditions=updated, available=True)

    message = f"Waiting for components to become available: {', '.join(not_ready)}"
    updated = set_operator_conditions(
        conditions,
        available=(False, REASON_DEPLOYING, message),
        progressing=(True, REASON_DEPLOYING, message),
        degraded=(False, REASON_DEPLOYING, message),
    )
    return AggregateStatus(conditions=updated, available=False)


def is_available(status: dict[str, Any] | None) -> bool:
    """Return whether an operator object status reports Available=True."""
    return is_condition_true((status or {}).get("conditions", []), COND_AVAILABLE)
