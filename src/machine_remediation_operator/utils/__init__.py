"""Utility functions for the Machine Remediation Operator."""

from .conditions import (
    get_condition,
    is_condition_true,
    set_operator_conditions,
    update_condition,
)
from .context import (
    get_context_dict,
    get_correlation_id,
    with_correlation_id,
)
from .events import emit_event

__all__ = [
    "update_condition",
    "set_operator_conditions",
    "get_condition",
    "is_condition_true",
    "emit_event",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
]
