"""Builders for resources managed by the operator."""

from .desired_state import (
    DesiredResource,
    DesiredState,
    build_desired_state,
    build_managed_resources,
    requires_master_policies,
)

__all__ = [
    "DesiredResource",
    "DesiredState",
    "build_desired_state",
    "build_managed_resources",
    "requires_master_policies",
]
