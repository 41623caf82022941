"""Builders for the master machine health check and disruption budget."""

from __future__ import annotations

from typing import Any

from ..constants import (
    LABEL_MACHINE_ROLE,
    LABEL_MANAGED_BY,
    MACHINE_ROLE_MASTER,
    MASTER_MACHINE_DISRUPTION_BUDGET,
    MASTER_MACHINE_HEALTH_CHECK,
)
from ..resources import MACHINE_DISRUPTION_BUDGET, MACHINE_HEALTH_CHECK


def _master_selector() -> dict[str, Any]:
    return {"matchLabels": {LABEL_MACHINE_ROLE: MACHINE_ROLE_MASTER}}


def create_master_machine_health_check(namespace: str, owner: str) -> dict[str, Any]:
    """Create the MachineHealthCheck watching master machines."""
    return {
        "apiVersion": MACHINE_HEALTH_CHECK.api_version,
        "kind": MACHINE_HEALTH_CHECK.kind,
        "metadata": {
            "name": MASTER_MACHINE_HEALTH_CHECK,
            "namespace": namespace,
            "labels": {LABEL_MANAGED_BY: owner},
        },
        "spec": {
            "selector": _master_selector(),
        },
    }


def create_master_machine_disruption_budget(namespace: str, owner: str) -> dict[str, Any]:
    """Create the MachineDisruptionBudget allowing one master to be remediated at a time."""
    return {
        "apiVersion": MACHINE_DISRUPTION_BUDGET.api_version,
        "kind": MACHINE_DISRUPTION_BUDGET.kind,
        "metadata": {
            "name": MASTER_MACHINE_DISRUPTION_BUDGET,
            "namespace": namespace,
            "labels": {LABEL_MANAGED_BY: owner},
        },
        "spec": {
            "selector": _master_selector(),
            "maxUnavailable": 1,
        },
    }
