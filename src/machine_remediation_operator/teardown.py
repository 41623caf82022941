"""Removal of every resource the operator owns."""

from __future__ import annotations

import logging

from . import metrics
from .builders import DesiredResource, DesiredState
from .store import ClusterStore, NotFoundError, StoreError, describe

logger = logging.getLogger(__name__)


class TeardownError(Exception):
    """Raised when one or more managed resources could not be deleted."""

    def __init__(self, failures: list[tuple[DesiredResource, Exception]]):
        self.failures = failures
        details = "; ".join(
            f"{describe(resource.kind, resource.name, resource.namespace)}: {error}"
            for resource, error in failures
        )
        super().__init__(f"Failed to delete {len(failures)} resource(s): {details}")


def teardown(store: ClusterStore, managed: DesiredState) -> int:
    """Delete every managed resource.

    Policies go first, then deployments, then CRDs. A resource that is
    already gone counts as deleted. Every delete is attempted even after a
    failure.

    Returns:
        Number of resources actually deleted

    Raises:
        TeardownError: If any delete failed for a reason other than not-found
    """
    failures: list[tuple[DesiredResource, Exception]] = []
    deleted = 0

    for resource in (*managed.policies, *managed.deployments, *managed.crds):
        try:
            store.delete(resource.kind, resource.name, resource.namespace)
        except NotFoundError:
            metrics.resource_operations_total.labels(
                kind=resource.kind.kind, operation="delete", result="not_found"
            ).inc()
            continue
        except StoreError as e:
            logger.warning(f"Failed to delete {describe(resource.kind, resource.name, resource.namespace)}: {e}")
            metrics.resource_operations_total.labels(
                kind=resource.kind.kind, operation="delete", result="error"
            ).inc()
            failures.append((resource, e))
            continue
        metrics.resource_operations_total.labels(
            kind=resource.kind.kind, operation="delete", result="success"
        ).inc()
        deleted += 1

    if failures:
        raise TeardownError(failures)
    return deleted
