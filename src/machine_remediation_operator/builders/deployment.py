"""Builder for managed component deployments."""

from __future__ import annotations

from typing import Any

from ..constants import (
    COMPONENT_SERVICE_ACCOUNT,
    LABEL_APP,
    LABEL_MANAGED_BY,
    PULL_POLICIES,
)
from ..resources import DEPLOYMENT


def compose_image(registry: str, component: str, version: str) -> str:
    """Return the image reference for a component."""
    return f"{registry.rstrip('/')}/{component}:{version}"


def validate_pull_policy(pull_policy: str) -> str:
    """Return the pull policy unchanged if Kubernetes accepts it.

    Raises:
        ValueError: If the pull policy is not a known value
    """
    if pull_policy not in PULL_POLICIES:
        raise ValueError(
            f"imagePullPolicy must be one of {', '.join(PULL_POLICIES)}, got {pull_policy!r}"
        )
    return pull_policy


def create_component_container(component: str, namespace: str) -> dict[str, Any]:
    """Create the container template for a component, without image settings."""
    return {
        "name": component,
        "command": [f"/usr/bin/{component}"],
        "args": [
            "--logtostderr=true",
            "--v=3",
            f"--namespace={namespace}",
        ],
        "resources": {
            "requests": {"cpu": "10m", "memory": "50Mi"},
        },
    }


def create_deployment(
    component: str,
    namespace: str,
    registry: str,
    version: str,
    pull_policy: str | None,
    replicas: int,
    owner: str,
) -> dict[str, Any]:
    """Create a deployment body for a managed component.

    The image is derived from the container's own name, so every container
    in the template runs the component image it is named after.

    Args:
        component: Component name, also used as deployment and container name
        namespace: Namespace for the deployment
        registry: Image registry
        version: Image tag
        pull_policy: Image pull policy copied onto every container, left
            unset when None
        replicas: Desired replica count
        owner: Name of the configuration object managing the deployment

    Returns:
        Deployment body
    """
    labels = {LABEL_APP: component, LABEL_MANAGED_BY: owner}
    container = create_component_container(component, namespace)
    container["image"] = compose_image(registry, container["name"], version)
    if pull_policy:
        container["imagePullPolicy"] = pull_policy

    return {
        "apiVersion": DEPLOYMENT.api_version,
        "kind": DEPLOYMENT.kind,
        "metadata": {
            "name": component,
            "namespace": namespace,
            "labels": labels,
        },
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {LABEL_APP: component}},
            "template": {
                "metadata": {"labels": labels},
                "spec": {
                    "serviceAccountName": COMPONENT_SERVICE_ACCOUNT,
                    "priorityClassName": "system-node-critical",
                    "nodeSelector": {"node-role.kubernetes.io/master": ""},
                    "tolerations": [
                        {
                            "key": "node-role.kubernetes.io/master",
                            "effect": "NoSchedule",
                        }
                    ],
                    "containers": [container],
                },
            },
        },
    }
