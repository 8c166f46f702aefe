"""
docdb-remediation: automated remediation of non-compliant Amazon DocumentDB resources.
"""
from .version import __version__, VERSION_INFO, get_version, get_version_info
from .models import (
    ComplianceEvent,
    ComplianceType,
    Notification,
    OutcomeKind,
    RemediationDirective,
    RemediationOutcome,
    ResourceType,
)
from .exceptions import (
    ErrorKind,
    RemediationError,
    ResourceNotFoundError,
    ConfigurationMissingError,
    TransportError,
    WorkflowError,
)
from .remediation.workflow import RemediationWorkflow
from .metrics import get_metrics_text

__all__ = [
    "__version__",
    "VERSION_INFO",
    "get_version",
    "get_version_info",
    "ComplianceEvent",
    "ComplianceType",
    "Notification",
    "OutcomeKind",
    "RemediationDirective",
    "RemediationOutcome",
    "ResourceType",
    "ErrorKind",
    "RemediationError",
    "ResourceNotFoundError",
    "ConfigurationMissingError",
    "TransportError",
    "WorkflowError",
    "RemediationWorkflow",
    "get_metrics_text",
]
