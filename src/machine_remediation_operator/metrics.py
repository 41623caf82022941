"""Prometheus metrics for the Machine Remediation Operator."""

from prometheus_client import Counter, Gauge, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "machine_remediation_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "machine_remediation_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "machine_remediation_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# Dependent resource metrics
resource_operations_total = Counter(
    "machine_remediation_operator_resource_operations_total",
    "Total number of operations on managed resources",
    ["kind", "operation", "result"],
)

condition_status = Gauge(
    "machine_remediation_operator_condition",
    "Current status of operator conditions (1 when True)",
    ["name", "namespace", "condition"],
)

# API call metrics
api_call_total = Counter(
    "machine_remediation_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "machine_remediation_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
