"""Finalizer guard for the operator configuration object."""

from __future__ import annotations

import copy
from typing import Any

from .constants import FINALIZER
from .resources import ResourceKind
from .store import ClusterStore


def has_finalizer(obj: dict[str, Any], finalizer: str = FINALIZER) -> bool:
    """Return whether the object carries the finalizer."""
    return finalizer in (obj.get("metadata", {}).get("finalizers") or [])


class FinalizerGuard:
    """Adds and removes the operator's finalizer, persisting each change.

    Both operations work on a copy and only return the new object once the
    store accepted it, so a failed write leaves the caller's object as it
    was.
    """

    def __init__(self, store: ClusterStore, kind: ResourceKind, finalizer: str = FINALIZER):
        self.store = store
        self.kind = kind
        self.finalizer = finalizer

    def ensure(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Add the finalizer and persist the object.

        Returns:
            The stored object, or the given one unchanged if the finalizer
            was already present
        """
        if has_finalizer(obj, self.finalizer):
            return obj

        updated = copy.deepcopy(obj)
        metadata = updated.setdefault("metadata", {})
        metadata["finalizers"] = [*(metadata.get("finalizers") or []), self.finalizer]
        return self.store.update(self.kind, updated)

    def release(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Remove the finalizer and persist the object.

        Returns:
            The stored object, or the given one unchanged if the finalizer
            was already absent
        """
        if not has_finalizer(obj, self.finalizer):
            return obj

        updated = copy.deepcopy(obj)
        metadata = updated["metadata"]
        metadata["finalizers"] = [f for f in metadata["finalizers"] if f != self.finalizer]
        return self.store.update(self.kind, updated)
