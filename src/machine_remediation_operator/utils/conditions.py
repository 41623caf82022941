"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_AVAILABLE, COND_DEGRADED, COND_PROGRESSING


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
) -> list[dict[str, Any]]:
    """Update or add a condition in a copy of the conditions list.

    Args:
        conditions: List of existing conditions, left unmodified
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    updated = [dict(cond) for cond in conditions]

    # Find existing condition
    existing_idx = None
    for idx, cond in enumerate(updated):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if existing_idx is not None:
        existing = updated[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        updated[existing_idx] = new_condition
    else:
        updated.append(new_condition)

    return updated


def set_operator_conditions(
    conditions: list[dict[str, Any]],
    available: tuple[bool, str, str],
    progressing: tuple[bool, str, str],
    degraded: tuple[bool, str, str],
) -> list[dict[str, Any]]:
    """Set all three operator conditions at once.

    Each argument is a (status, reason, message) tuple. The three are always
    written together so observers never see a partial update.
    """
    for condition_type, (status, reason, message) in (
        (COND_AVAILABLE, available),
        (COND_PROGRESSING, progressing),
        (COND_DEGRADED, degraded),
    ):
        conditions = update_condition(
            conditions, condition_type, "True" if status else "False", reason, message
        )
    return conditions


def get_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition of the given type, if present."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def is_condition_true(conditions: list[dict[str, Any]], condition_type: str) -> bool:
    """Return whether the condition of the given type has status True."""
    cond = get_condition(conditions, condition_type)
    return cond is not None and cond.get("status") == "True"
