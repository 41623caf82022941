"""Reconciliation of MachineRemediationOperator objects."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from . import metrics
from .builders import DesiredState, build_desired_state, build_managed_resources
from .config import OperatorConfig
from .constants import API_GROUP, CONDITION_TYPES, KIND_OPERATOR, REQUEUE_AFTER_SECONDS
from .finalizers import FinalizerGuard, has_finalizer
from .handlers.base import BaseHandler
from .manifests import load_manifests
from .platform import PlatformType
from .resources import CRD, OPERATOR
from .status import aggregate_status, is_available
from .store import ClusterStore, ConflictError, NotFoundError, StoreError, describe
from .teardown import TeardownError, teardown
from .tracing import add_span_attribute, trace_span
from .utils.conditions import is_condition_true


@dataclass(frozen=True)
class ReconcileResult:
    """Scheduling directive returned by a reconciliation."""

    requeue_after: float | None = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None

    @classmethod
    def done(cls) -> ReconcileResult:
        return cls()

    @classmethod
    def after(cls, seconds: float) -> ReconcileResult:
        return cls(requeue_after=seconds)


class PlatformOracle(Protocol):
    def get_platform(self) -> PlatformType:
        ...


class EventRecorder(Protocol):
    def finalizer_added(self, body: dict[str, Any]) -> None:
        ...

    def resource_created(self, body: dict[str, Any], kind: str, name: str) -> None:
        ...

    def teardown_completed(self, body: dict[str, Any], deleted: int) -> None:
        ...

    def available(self, body: dict[str, Any]) -> None:
        ...


class MachineRemediationOperatorReconciler(BaseHandler):
    """Drives the cluster toward the resources a MachineRemediationOperator asks for.

    Every call starts from what the store reports and keeps nothing between
    calls, so it is safe to repeat at any time. The caller must not run two
    calls for the same object concurrently.
    """

    def __init__(
        self,
        store: ClusterStore,
        oracle: PlatformOracle,
        config: OperatorConfig,
        recorder: EventRecorder,
        manifest_loader: Callable[..., list[dict[str, Any]]] = load_manifests,
    ):
        super().__init__(KIND_OPERATOR)
        self.store = store
        self.oracle = oracle
        self.config = config
        self.recorder = recorder
        self.manifest_loader = manifest_loader
        self.finalizers = FinalizerGuard(store, OPERATOR)

    def get_replicas_count(self) -> int:
        """Return the replica count every component deployment must reach."""
        return self.config.desired_replicas

    def load_crd_templates(self) -> list[dict[str, Any]]:
        """Load CRD templates from the manifests directory."""
        return self.manifest_loader(self.config.crds_manifests_dir, kind=CRD.kind)

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Reconcile one operator object.

        The first call on a new object only adds the finalizer. Later calls
        create missing resources and report status, asking to be called
        again until every component is available. Once the object is marked
        for deletion, every managed resource is removed before the finalizer
        is released.

        Raises:
            StoreError: If a store call fails; nothing is retried internally
            TeardownError: If a managed resource could not be deleted
        """
        with trace_span("reconcile", kind=self.kind, attributes={"name": name, "namespace": namespace}):
            try:
                obj = self.store.get(OPERATOR, name, namespace)
            except NotFoundError:
                self.log_info(
                    {"name": name, "namespace": namespace},
                    "Object no longer exists, nothing to do",
                    reason="NotFound",
                )
                return ReconcileResult.done()

            if obj["metadata"].get("deletionTimestamp"):
                add_span_attribute("reconcile.phase", "deletion")
                if has_finalizer(obj):
                    self._delete(obj)
                return ReconcileResult.done()

            if not has_finalizer(obj):
                add_span_attribute("reconcile.phase", "finalizer")
                self.finalizers.ensure(obj)
                self.log_info(obj["metadata"], "Added finalizer", reason="FinalizerAdded")
                self.recorder.finalizer_added(obj)
                return ReconcileResult.done()

            add_span_attribute("reconcile.phase", "converge")
            return self._converge(obj)

    def _delete(self, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.log_info(meta, "Object is being deleted", event="deletion", reason="Deletion")

        with trace_span("teardown", kind=self.kind):
            managed = build_managed_resources(meta["name"], self.load_crd_templates(), self.config)
            try:
                deleted = teardown(self.store, managed)
            except TeardownError as e:
                self.log_warning(
                    meta, "Teardown incomplete, keeping finalizer", event="deletion",
                    reason="TeardownFailed", failed=len(e.failures),
                )
                raise

        self.finalizers.release(obj)
        for condition_type in CONDITION_TYPES:
            with suppress(KeyError):
                metrics.condition_status.remove(meta["name"], meta["namespace"], condition_type)
        self.log_info(
            meta, "Removed managed resources and finalizer", event="deletion",
            reason="TeardownCompleted", deleted=deleted,
        )
        self.recorder.teardown_completed(obj, deleted)

    def _converge(self, obj: dict[str, Any]) -> ReconcileResult:
        meta = obj["metadata"]
        try:
            with trace_span("build_desired_state", kind=self.kind):
                platform = self.oracle.get_platform()
                desired = build_desired_state(
                    obj.get("spec") or {},
                    meta["name"],
                    platform,
                    self.load_crd_templates(),
                    self.config,
                )
            add_span_attribute("cluster.platform", platform.value)

            with trace_span("apply_desired_state", kind=self.kind):
                pending = self._create_missing(obj, desired)

            observed = self._observe_deployments(desired)
        except Exception as e:
            self._record_degraded(obj, e)
            raise

        conditions = (obj.get("status") or {}).get("conditions", [])
        aggregate = aggregate_status(conditions, observed, self.get_replicas_count(), pending=pending)
        was_available = is_available(obj.get("status"))
        self._write_conditions(obj, aggregate.conditions)

        if aggregate.available:
            if not was_available:
                self.log_info(meta, "All components are available", reason="Available")
                self.recorder.available(obj)
            return ReconcileResult.done()

        self.log_info(
            meta, "Waiting for components to become available", reason="Progressing",
            requeue_after=REQUEUE_AFTER_SECONDS,
        )
        return ReconcileResult.after(REQUEUE_AFTER_SECONDS)

    def _create_missing(self, obj: dict[str, Any], desired: DesiredState) -> list[str]:
        """Create every desired resource that does not exist yet.

        Existing resources are left untouched, including ones another writer
        created between the lookup and the create. Kinds defined by the
        operator's own CRDs are not served until those CRDs are established;
        a create rejected with not-found is reported as pending.

        Returns:
            Names of resources that could not be created yet
        """
        pending: list[str] = []
        for resource in desired:
            try:
                self.store.get(resource.kind, resource.name, resource.namespace)
                continue
            except NotFoundError:
                pass

            try:
                self.store.create(resource.kind, resource.body)
            except ConflictError:
                metrics.resource_operations_total.labels(
                    kind=resource.kind.kind, operation="create", result="exists"
                ).inc()
                self.log_info(
                    obj["metadata"],
                    f"{describe(resource.kind, resource.name, resource.namespace)} already exists",
                    reason="AlreadyExists",
                )
                continue
            except NotFoundError:
                if resource.kind.group != API_GROUP:
                    metrics.resource_operations_total.labels(
                        kind=resource.kind.kind, operation="create", result="error"
                    ).inc()
                    raise
                metrics.resource_operations_total.labels(
                    kind=resource.kind.kind, operation="create", result="pending"
                ).inc()
                self.log_info(
                    obj["metadata"],
                    f"{resource.kind.kind} is not served yet, will retry",
                    reason="KindNotServed",
                    resource_name=resource.name,
                )
                pending.append(resource.name)
                continue
            except StoreError:
                metrics.resource_operations_total.labels(
                    kind=resource.kind.kind, operation="create", result="error"
                ).inc()
                raise
            metrics.resource_operations_total.labels(
                kind=resource.kind.kind, operation="create", result="success"
            ).inc()
            self.log_info(
                obj["metadata"],
                f"Created {describe(resource.kind, resource.name, resource.namespace)}",
                reason="ResourceCreated",
            )
            self.recorder.resource_created(obj, resource.kind.kind, resource.name)
        return pending

    def _observe_deployments(self, desired: DesiredState) -> dict[str, dict[str, Any] | None]:
        observed: dict[str, dict[str, Any] | None] = {}
        for resource in desired.deployments:
            try:
                observed[resource.name] = self.store.get(resource.kind, resource.name, resource.namespace)
            except NotFoundError:
                observed[resource.name] = None
        return observed

    def _record_degraded(self, obj: dict[str, Any], error: Exception) -> None:
        """Report an error through the Degraded condition.

        A failure to write the status is logged; the original error is the
        one the caller sees.
        """
        meta = obj["metadata"]
        conditions = (obj.get("status") or {}).get("conditions", [])
        aggregate = aggregate_status(conditions, {}, self.get_replicas_count(), error=error)
        try:
            self._write_conditions(obj, aggregate.conditions)
        except StoreError as status_error:
            self.log_error(meta, "Failed to record Degraded status", error=status_error, reason="StatusUpdateFailed")

    def _write_conditions(self, obj: dict[str, Any], conditions: list[dict[str, Any]]) -> None:
        """Persist conditions, skipping the write when nothing changed."""
        meta = obj["metadata"]
        status = dict(obj.get("status") or {})
        if status.get("conditions") != conditions:
            status["conditions"] = conditions
            self.store.update_status(OPERATOR, {"metadata": meta, "status": status})

        for condition_type in CONDITION_TYPES:
            metrics.condition_status.labels(
                name=meta["name"], namespace=meta["namespace"], condition=condition_type
            ).set(1 if is_condition_true(conditions, condition_type) else 0)
