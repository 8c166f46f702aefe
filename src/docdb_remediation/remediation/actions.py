"""
Remediation actions for docdb-remediation.

Each action resolves a durable resource identifier to the resource's current
name and applies one idempotent configuration change.

Classes:
    RemediationAction: Base class for all actions
    DeletionProtectionRemediation: Enable deletion protection
    ParameterGroupRemediation: Assign the desired cluster parameter group
    BackupRetentionRemediation: Set the desired backup retention period

Example:
    >>> from docdb_remediation.remediation.actions import DeletionProtectionRemediation
    >>> action = DeletionProtectionRemediation(resolver, control_plane)
    >>> result = action.remediate("cluster-ABCDEFGHIJ")
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import (
    FIELD_BACKUP_RETENTION_PERIOD,
    FIELD_DELETION_PROTECTION,
    FIELD_PARAMETER_GROUP,
)
from ..exceptions import ConfigurationMissingError
from ..integrations.base import ControlPlane
from ..models import RemediationDirective, ResourceType
from .resolver import ResourceResolver

logger = logging.getLogger(__name__)


class ActionStatus(Enum):
    """Status of action execution."""
    SUCCESS = "success"
    SKIPPED = "skipped"  # dry run


@dataclass
class ActionResult:
    """Result of a successful action execution."""

    status: ActionStatus
    message: str
    directive: RemediationDirective
    resource_name: str
    field: str
    value: Any
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "message": self.message,
            "directive": self.directive.value,
            "resource_name": self.resource_name,
            "field": self.field,
            "value": self.value,
            "duration_seconds": self.duration_seconds,
            "timestamp": self.timestamp.isoformat()
        }


class RemediationAction(ABC):
    """
    Base class for remediation actions.

    Subclasses name the directive they serve, the control-plane field they
    set and how the desired value is obtained. The algorithm is shared:
    check the desired value, resolve, apply one mutation. Errors from the
    resolver and control plane propagate unchanged.
    """

    directive: RemediationDirective
    field: str
    resource_type: ResourceType = ResourceType.CLUSTER

    def __init__(
        self,
        resolver: ResourceResolver,
        control_plane: ControlPlane,
        dry_run: bool = False
    ):
        """
        Initialize action.

        Args:
            resolver: Resolver for durable identifiers
            control_plane: Control plane to apply the mutation with
            dry_run: If True, resolve but skip the mutation
        """
        self.resolver = resolver
        self.control_plane = control_plane
        self.dry_run = dry_run

    @abstractmethod
    def desired_value(self) -> Any:
        """
        Value the field must be set to.

        Raises:
            ConfigurationMissingError: If the value is not configured
        """
        pass

    def validate(self) -> Optional[str]:
        """
        Validate action configuration.

        Returns:
            Error message if invalid, None if valid
        """
        try:
            self.desired_value()
        except ConfigurationMissingError as e:
            return str(e)
        return None

    def remediate(self, resource_id: Optional[str]) -> ActionResult:
        """
        Bring the resource into compliance.

        Args:
            resource_id: Durable identifier from the compliance event

        Returns:
            ActionResult describing the applied change

        Raises:
            ConfigurationMissingError: Before any collaborator call, if the
                desired value is not configured
            ResourceNotFoundError: If the identifier matches no resource
            TransportError: If the control plane call fails
        """
        start_time = datetime.now()
        value = self.desired_value()
        resource = self.resolver.resolve(resource_id, self.resource_type)

        if self.dry_run:
            message = (
                f"[DRY RUN] Would set {self.field}={value} on {resource.current_name}"
            )
            logger.info(message)
            return ActionResult(
                status=ActionStatus.SKIPPED,
                message=message,
                directive=self.directive,
                resource_name=resource.current_name,
                field=self.field,
                value=value,
            )

        self.control_plane.apply_configuration(
            resource.current_name,
            self.field,
            value,
            resource_type=self.resource_type
        )

        message = f"{self.field}={value} applied to {resource.current_name}"
        logger.info(message)
        return ActionResult(
            status=ActionStatus.SUCCESS,
            message=message,
            directive=self.directive,
            resource_name=resource.current_name,
            field=self.field,
            value=value,
            duration_seconds=(datetime.now() - start_time).total_seconds()
        )

    def __str__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(dry_run={self.dry_run})"


class DeletionProtectionRemediation(RemediationAction):
    """Enable deletion protection on a cluster. Needs no configuration."""

    directive = RemediationDirective.DELETION_PROTECTION
    field = FIELD_DELETION_PROTECTION

    def desired_value(self) -> bool:
        return True


class ParameterGroupRemediation(RemediationAction):
    """Assign the desired cluster parameter group."""

    directive = RemediationDirective.PARAMETER_GROUP
    field = FIELD_PARAMETER_GROUP

    def __init__(
        self,
        resolver: ResourceResolver,
        control_plane: ControlPlane,
        desired_parameter_group: Optional[str] = None,
        dry_run: bool = False
    ):
        super().__init__(resolver, control_plane, dry_run=dry_run)
        self.desired_parameter_group = desired_parameter_group

    def desired_value(self) -> str:
        if not self.desired_parameter_group:
            raise ConfigurationMissingError(
                "desired_parameter_group",
                "Desired cluster parameter group not found"
            )
        return self.desired_parameter_group


class BackupRetentionRemediation(RemediationAction):
    """Set the desired backup retention period (days)."""

    directive = RemediationDirective.BACKUP_RETENTION
    field = FIELD_BACKUP_RETENTION_PERIOD

    def __init__(
        self,
        resolver: ResourceResolver,
        control_plane: ControlPlane,
        desired_backup_retention_period: Optional[int] = None,
        dry_run: bool = False
    ):
        super().__init__(resolver, control_plane, dry_run=dry_run)
        self.desired_backup_retention_period = desired_backup_retention_period

    def desired_value(self) -> int:
        if self.desired_backup_retention_period is None:
            raise ConfigurationMissingError(
                "desired_backup_retention_period",
                "Desired cluster backup retention period not found"
            )
        return int(self.desired_backup_retention_period)
