"""
Custom exception types for docdb-remediation.

Every error carries an ``ErrorKind`` tag. The workflow routes failures by
matching on that tag rather than on exception class names.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Tag identifying the category of a remediation error."""
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFIGURATION_MISSING = "configuration_missing"
    INVALID_CONFIG = "invalid_config"
    TRANSPORT = "transport"
    INVALID_EVENT = "invalid_event"
    WORKFLOW = "workflow"


class RemediationError(Exception):
    """Base exception for all docdb-remediation errors."""
    kind: ErrorKind = ErrorKind.WORKFLOW


class ResourceNotFoundError(RemediationError):
    """No resource matches the durable identifier.

    Expected and recoverable: the resource may have been deleted or renamed
    between evaluation and remediation.
    """
    kind = ErrorKind.RESOURCE_NOT_FOUND

    def __init__(self, identifier: Optional[str], message: Optional[str] = None):
        self.identifier = identifier
        super().__init__(message or f"Resource with resourceId={identifier} not found")


# Configuration errors
class ConfigurationError(RemediationError):
    """Base exception for configuration errors."""
    kind = ErrorKind.INVALID_CONFIG


class ConfigurationMissingError(ConfigurationError):
    """A remediation action has no desired value configured."""
    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(self, option: str, message: Optional[str] = None):
        self.option = option
        super().__init__(message or f"Required configuration '{option}' not found")


class InvalidConfigError(ConfigurationError):
    """Invalid configuration."""
    pass


# External service errors
class TransportError(RemediationError):
    """A call to the control plane or notification channel failed."""
    kind = ErrorKind.TRANSPORT

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class InvalidEventError(RemediationError):
    """Payload could not be parsed as a compliance event."""
    kind = ErrorKind.INVALID_EVENT


class EventLoadError(RemediationError):
    """Events file could not be read."""
    kind = ErrorKind.INVALID_EVENT


class WorkflowError(RemediationError):
    """A workflow execution failed with an uncaught error.

    The original error is available as ``__cause__``.
    """
    kind = ErrorKind.WORKFLOW

    def __init__(self, execution_id: str, state: str, message: str):
        self.execution_id = execution_id
        self.state = state
        super().__init__(f"Execution {execution_id} failed in state '{state}': {message}")

    @property
    def cause_kind(self) -> Optional[ErrorKind]:
        """Error kind of the underlying failure, if it was a remediation error."""
        cause = self.__cause__
        if isinstance(cause, RemediationError):
            return cause.kind
        return None


__all__ = [
    "ErrorKind",
    "RemediationError",
    "ResourceNotFoundError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "InvalidConfigError",
    "TransportError",
    "InvalidEventError",
    "EventLoadError",
    "WorkflowError",
]
