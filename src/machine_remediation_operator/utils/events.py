"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_AVAILABLE,
    EVENT_REASON_FINALIZER_ADDED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RESOURCE_CREATED,
    EVENT_REASON_TEARDOWN_COMPLETED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_finalizer_added(body: dict[str, Any]) -> None:
    """Emit finalizer added event."""
    emit_event(body, EVENT_REASON_FINALIZER_ADDED, "Finalizer added")


def emit_resource_created(body: dict[str, Any], kind: str, name: str) -> None:
    """Emit resource created event."""
    emit_event(body, EVENT_REASON_RESOURCE_CREATED, f"{kind} {name} created")


def emit_teardown_completed(body: dict[str, Any], deleted: int) -> None:
    """Emit teardown completed event."""
    emit_event(body, EVENT_REASON_TEARDOWN_COMPLETED, f"Deleted {deleted} managed resource(s)")


def emit_available(body: dict[str, Any]) -> None:
    """Emit available event."""
    emit_event(body, EVENT_REASON_AVAILABLE, "All components are available")


class KopfEventRecorder:
    """Records reconciliation milestones as Kubernetes events through kopf."""

    def finalizer_added(self, body: dict[str, Any]) -> None:
        emit_finalizer_added(body)

    def resource_created(self, body: dict[str, Any], kind: str, name: str) -> None:
        emit_resource_created(body, kind, name)

    def teardown_completed(self, body: dict[str, Any], deleted: int) -> None:
        emit_teardown_completed(body, deleted)

    def available(self, body: dict[str, Any]) -> None:
        emit_available(body)
