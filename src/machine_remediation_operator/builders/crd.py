"""Builder for custom resource definitions loaded from templates."""

from __future__ import annotations

import copy
from typing import Any

from ..constants import LABEL_MANAGED_BY
from ..resources import CRD


def create_crd_from_template(template: dict[str, Any], owner: str) -> dict[str, Any]:
    """Create a CRD body from a raw template.

    The template is copied, never modified.

    Raises:
        ValueError: If the template is not an apiextensions.k8s.io/v1 CRD
    """
    name = template.get("metadata", {}).get("name")
    if template.get("kind") != CRD.kind or template.get("apiVersion") != CRD.api_version:
        raise ValueError(f"Template {name} is not a {CRD.api_version} {CRD.kind}")

    crd = copy.deepcopy(template)
    metadata = crd["metadata"]
    metadata.pop("namespace", None)
    metadata.setdefault("labels", {})[LABEL_MANAGED_BY] = owner
    return crd
