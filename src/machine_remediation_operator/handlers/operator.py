"""Kopf handlers for the MachineRemediationOperator CRD."""

from __future__ import annotations

import threading
from typing import Any

import kopf

from ..constants import API_GROUP, API_VERSION, PLURAL_OPERATOR, REQUEUE_AFTER_SECONDS
from ..finalizers import has_finalizer
from ..reconciler import MachineRemediationOperatorReconciler, ReconcileResult
from ..status import is_available
from ..teardown import TeardownError
from ..utils.context import with_correlation_id


class ObjectLocks:
    """One lock per object, shared by every handler of that object.

    kopf runs a timer in its own task alongside the event handlers of the
    same object; every handler holds the object's lock while reconciling.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = {}

    def get(self, namespace: str, name: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault((namespace, name), threading.Lock())

    def forget(self, namespace: str, name: str) -> None:
        with self._guard:
            self._locks.pop((namespace, name), None)


def run_reconcile(body: kopf.Body, memo: kopf.Memo) -> ReconcileResult:
    """Reconcile the object behind a kopf body with the reconciler held in memo.

    Calls for the same object never overlap.
    """
    reconciler: MachineRemediationOperatorReconciler = memo.reconciler
    meta = body["metadata"]
    with memo.object_locks.get(meta["namespace"], meta["name"]), with_correlation_id():
        return reconciler.reconcile_with_metrics(
            dict(body),
            lambda: reconciler.reconcile(meta["namespace"], meta["name"]),
        )


def needs_requeue(body: kopf.Body, **_: Any) -> bool:
    """Return whether an object is still waiting for its components."""
    meta = body.get("metadata", {})
    return (
        not meta.get("deletionTimestamp")
        and has_finalizer(dict(body))
        and not is_available(body.get("status"))
    )


@kopf.on.event(API_GROUP, API_VERSION, PLURAL_OPERATOR)
def handle_operator_event(
    event: dict[str, Any],
    body: kopf.Body,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """Reconcile on every watched change of a MachineRemediationOperator."""
    if event.get("type") == "DELETED":
        return
    run_reconcile(body, memo)


@kopf.timer(
    API_GROUP,
    API_VERSION,
    PLURAL_OPERATOR,
    interval=REQUEUE_AFTER_SECONDS,
    initial_delay=REQUEUE_AFTER_SECONDS,
    when=needs_requeue,
)
def requeue_operator(body: kopf.Body, memo: kopf.Memo, **kwargs: Any) -> None:
    """Poll components of an object that is not available yet."""
    run_reconcile(body, memo)


@kopf.on.delete(API_GROUP, API_VERSION, PLURAL_OPERATOR)
def handle_operator_delete(body: kopf.Body, memo: kopf.Memo, **kwargs: Any) -> None:
    """Retry teardown until every managed resource is gone."""
    try:
        run_reconcile(body, memo)
    except TeardownError as e:
        raise kopf.TemporaryError(str(e), delay=REQUEUE_AFTER_SECONDS) from e
    meta = body["metadata"]
    memo.object_locks.forget(meta["namespace"], meta["name"])
