"""Constants for the Machine Remediation Operator."""

# API Group
API_GROUP = "machineremediation.kubevirt.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_OPERATOR = "MachineRemediationOperator"
KIND_MACHINE_HEALTH_CHECK = "MachineHealthCheck"
KIND_MACHINE_DISRUPTION_BUDGET = "MachineDisruptionBudget"
KIND_DEPLOYMENT = "Deployment"
KIND_CRD = "CustomResourceDefinition"
KIND_INFRASTRUCTURE = "Infrastructure"

PLURAL_OPERATOR = "machineremediationoperators"

# Namespace shared with the machine API components
NAMESPACE_MACHINE_API = "openshift-machine-api"

# Managed components, one deployment each
COMPONENT_MACHINE_REMEDIATION = "machine-remediation"
COMPONENT_MACHINE_HEALTH_CHECK = "machine-health-check"
COMPONENT_MACHINE_DISRUPTION_BUDGET = "machine-disruption-budget"
COMPONENTS = (
    COMPONENT_MACHINE_REMEDIATION,
    COMPONENT_MACHINE_HEALTH_CHECK,
    COMPONENT_MACHINE_DISRUPTION_BUDGET,
)
COMPONENT_SERVICE_ACCOUNT = "machine-remediation-operator"

# Bare metal master policies
MASTER_MACHINE_HEALTH_CHECK = "masters-mhc"
MASTER_MACHINE_DISRUPTION_BUDGET = "masters-mdb"
LABEL_MACHINE_ROLE = "machine.openshift.io/cluster-api-machine-role"
MACHINE_ROLE_MASTER = "master"

# Infrastructure object describing the cluster platform
INFRASTRUCTURE_NAME = "cluster"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
LABEL_APP = "app"

# Finalizers
FINALIZER = f"{API_GROUP}/operator"

# Field Manager
FIELD_MANAGER = "machine-remediation-operator"

# Requeue interval while waiting for components to become ready
REQUEUE_AFTER_SECONDS = 5.0

# Image pull policies
PULL_POLICIES = ("Always", "IfNotPresent", "Never")

# Condition Types
COND_AVAILABLE = "Available"
COND_PROGRESSING = "Progressing"
COND_DEGRADED = "Degraded"
CONDITION_TYPES = (COND_AVAILABLE, COND_PROGRESSING, COND_DEGRADED)

# Condition Reasons
REASON_AS_EXPECTED = "AsExpected"
REASON_DEPLOYING = "Deploying"
REASON_RECONCILE_FAILED = "ReconcileFailed"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_FINALIZER_ADDED = "FinalizerAdded"
EVENT_REASON_RESOURCE_CREATED = "ResourceCreated"
EVENT_REASON_TEARDOWN_COMPLETED = "TeardownCompleted"
EVENT_REASON_AVAILABLE = "Available"
