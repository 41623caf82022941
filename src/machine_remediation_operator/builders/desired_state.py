"""Builder for the full set of resources an operator object should own."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..config import OperatorConfig
from ..constants import COMPONENTS
from ..platform import PlatformType
from ..resources import CRD, DEPLOYMENT, MACHINE_DISRUPTION_BUDGET, MACHINE_HEALTH_CHECK, ResourceKind
from .crd import create_crd_from_template
from .deployment import create_deployment, validate_pull_policy
from .policy import create_master_machine_disruption_budget, create_master_machine_health_check

# Every platform must appear here; tests check the mapping is exhaustive.
MASTER_POLICIES_BY_PLATFORM: dict[PlatformType, bool] = {
    PlatformType.AWS: False,
    PlatformType.AZURE: False,
    PlatformType.BARE_METAL: True,
    PlatformType.GCP: False,
    PlatformType.IBM_CLOUD: False,
    PlatformType.LIBVIRT: False,
    PlatformType.NONE: False,
    PlatformType.OPENSTACK: False,
    PlatformType.OVIRT: False,
    PlatformType.VSPHERE: False,
}


def requires_master_policies(platform: PlatformType) -> bool:
    """Return whether master health check and disruption budget are managed on a platform."""
    return MASTER_POLICIES_BY_PLATFORM[platform]


@dataclass(frozen=True)
class DesiredResource:
    """A resource body together with the kind used to address it."""

    kind: ResourceKind
    body: dict[str, Any]

    @property
    def name(self) -> str:
        return self.body["metadata"]["name"]

    @property
    def namespace(self) -> str | None:
        return self.body["metadata"].get("namespace") if self.kind.namespaced else None


@dataclass(frozen=True)
class DesiredState:
    """Ordered resources to create, grouped by role."""

    crds: tuple[DesiredResource, ...]
    deployments: tuple[DesiredResource, ...]
    policies: tuple[DesiredResource, ...]

    def __iter__(self):
        # CRDs first so that policy kinds exist before policies are created
        yield from self.crds
        yield from self.deployments
        yield from self.policies


def resolve_image_settings(spec: dict[str, Any], config: OperatorConfig) -> tuple[str, str, str | None]:
    """Return (registry, version, pull policy) for a configuration spec.

    An empty pull policy is returned as None so Kubernetes applies its own
    default.

    Raises:
        ValueError: If the pull policy is invalid
    """
    registry = spec.get("imageRegistry") or config.image_registry
    version = spec.get("version") or config.operator_version
    pull_policy = spec.get("imagePullPolicy") or None
    if pull_policy is not None:
        validate_pull_policy(pull_policy)
    return registry, version, pull_policy


def _build_crds(crd_templates: list[dict[str, Any]], owner: str) -> tuple[DesiredResource, ...]:
    return tuple(
        DesiredResource(CRD, create_crd_from_template(template, owner)) for template in crd_templates
    )


def _build_policies(namespace: str, owner: str) -> tuple[DesiredResource, ...]:
    return (
        DesiredResource(MACHINE_HEALTH_CHECK, create_master_machine_health_check(namespace, owner)),
        DesiredResource(MACHINE_DISRUPTION_BUDGET, create_master_machine_disruption_budget(namespace, owner)),
    )


def build_desired_state(
    spec: dict[str, Any],
    owner: str,
    platform: PlatformType,
    crd_templates: list[dict[str, Any]],
    config: OperatorConfig,
) -> DesiredState:
    """Build the resources an operator object should own.

    The result depends only on the arguments, never on what already exists
    in the cluster.

    Args:
        spec: Operator object spec
        owner: Operator object name
        platform: Cluster platform
        crd_templates: Raw CRD templates
        config: Operator configuration

    Returns:
        Desired state with CRDs, component deployments and, on bare metal,
        the master policies

    Raises:
        ValueError: If the spec or a template is invalid
    """
    registry, version, pull_policy = resolve_image_settings(spec, config)

    deployments = tuple(
        DesiredResource(
            DEPLOYMENT,
            create_deployment(
                component,
                config.namespace,
                registry,
                version,
                pull_policy,
                config.desired_replicas,
                owner,
            ),
        )
        for component in COMPONENTS
    )

    policies: tuple[DesiredResource, ...] = ()
    if requires_master_policies(platform):
        policies = _build_policies(config.namespace, owner)

    return DesiredState(
        crds=_build_crds(crd_templates, owner),
        deployments=deployments,
        policies=policies,
    )


def build_managed_resources(
    owner: str,
    crd_templates: list[dict[str, Any]],
    config: OperatorConfig,
) -> DesiredState:
    """Build every resource the operator may own on any platform.

    Used for teardown, which must not depend on the spec being valid or the
    platform lookup succeeding.
    """
    deployments = tuple(
        DesiredResource(
            DEPLOYMENT,
            create_deployment(
                component,
                config.namespace,
                config.image_registry,
                config.operator_version,
                None,
                config.desired_replicas,
                owner,
            ),
        )
        for component in COMPONENTS
    )
    return DesiredState(
        crds=_build_crds(crd_templates, owner),
        deployments=deployments,
        policies=_build_policies(config.namespace, owner),
    )
