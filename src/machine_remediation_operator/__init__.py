"""Machine Remediation Operator: installs and manages machine remediation components."""

__version__ = "0.1.0"
