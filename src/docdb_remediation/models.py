"""
Data models for docdb-remediation.

The inbound compliance event is validated with Pydantic; everything derived
inside a workflow execution is a plain dataclass scoped to that execution.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    BACKUP_RETENTION_RULE,
    DELETION_PROTECTION_RULE,
    NON_COMPLIANCE_SUBJECT,
    PARAMETER_GROUP_RULE,
    REMEDIATION_EXECUTED_MESSAGE,
    REMEDIATION_TYPE_NOT_FOUND_MESSAGE,
    RESOURCE_NOT_FOUND_MESSAGE,
)


class ResourceType(str, Enum):
    """Managed database resource types."""
    CLUSTER = "Cluster"
    INSTANCE = "Instance"

    @property
    def aws_type(self) -> str:
        """AWS Config resource type name."""
        return _AWS_TYPE_NAMES[self]


_AWS_TYPE_NAMES = {
    ResourceType.CLUSTER: "AWS::RDS::DBCluster",
    ResourceType.INSTANCE: "AWS::RDS::DBInstance",
}
_RESOURCE_TYPE_ALIASES = {
    "aws::rds::dbcluster": ResourceType.CLUSTER,
    "aws::rds::dbinstance": ResourceType.INSTANCE,
    "cluster": ResourceType.CLUSTER,
    "instance": ResourceType.INSTANCE,
}


class ComplianceType(str, Enum):
    """Compliance evaluation result."""
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"


class RemediationDirective(str, Enum):
    """Routing key derived from the config rule name."""
    PARAMETER_GROUP = PARAMETER_GROUP_RULE
    BACKUP_RETENTION = BACKUP_RETENTION_RULE
    DELETION_PROTECTION = DELETION_PROTECTION_RULE
    UNKNOWN = "unknown"


class OutcomeKind(str, Enum):
    """Terminal outcome of one workflow execution."""
    EXECUTED = "executed"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UNKNOWN_DIRECTIVE = "unknown_directive"


class ComplianceEvent(BaseModel):
    """
    Compliance-change event produced by the upstream evaluator.

    Accepts the camelCase field names of an AWS Config compliance change
    notification. ``complianceType`` may be given directly or nested under
    ``newEvaluationResult``.

    Attributes:
        config_rule_name: Name of the rule that evaluated the resource
        resource_type: Cluster or Instance
        resource_id: Durable resource identifier (empty if absent)
        compliance_type: COMPLIANT or NON_COMPLIANT
        aws_region: Region of the resource, if known
        aws_account_id: Account of the resource, if known
        notification_time: When the notification was created, if known
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    config_rule_name: str = Field(default="", alias="configRuleName")
    resource_type: ResourceType = Field(default=ResourceType.CLUSTER, alias="resourceType")
    resource_id: str = Field(default="", alias="resourceId")
    compliance_type: ComplianceType = Field(
        default=ComplianceType.NON_COMPLIANT, alias="complianceType"
    )
    aws_region: Optional[str] = Field(default=None, alias="awsRegion")
    aws_account_id: Optional[str] = Field(default=None, alias="awsAccountId")
    notification_time: Optional[datetime] = Field(default=None, alias="notificationCreationTime")

    @model_validator(mode="before")
    @classmethod
    def lift_compliance_type(cls, data: Any) -> Any:
        """Read complianceType from newEvaluationResult when not given at top level."""
        if isinstance(data, dict) and "complianceType" not in data and "compliance_type" not in data:
            result = data.get("newEvaluationResult")
            if isinstance(result, dict) and "complianceType" in result:
                data = {**data, "complianceType": result["complianceType"]}
        return data

    @field_validator("config_rule_name", "resource_id", mode="before")
    @classmethod
    def coerce_string(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("resource_type", mode="before")
    @classmethod
    def normalize_resource_type(cls, v: Any) -> Any:
        """Map AWS resource type names onto ResourceType."""
        if isinstance(v, str):
            return _RESOURCE_TYPE_ALIASES.get(v.lower(), v)
        return v

    @field_validator("notification_time", mode="before")
    @classmethod
    def parse_notification_time(cls, v: Any) -> Optional[datetime]:
        if v is None or isinstance(v, datetime):
            return v
        if isinstance(v, str):
            try:
                return date_parser.parse(v)
            except (ValueError, OverflowError):
                return None
        return None

    def to_detail(self) -> Dict[str, Any]:
        """Event as a JSON-safe dict using the wire field names."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


@dataclass
class ResourceRecord:
    """One entry of the control-plane resource inventory."""
    identifier: str
    current_name: str
    resource_type: ResourceType = ResourceType.CLUSTER
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedResource:
    """Durable identifier paired with the resource's current name."""
    identifier: str
    current_name: str
    resource_type: ResourceType = ResourceType.CLUSTER


@dataclass(frozen=True)
class Notification:
    """Message sent to the notification channel."""
    subject: str
    body: str

    @classmethod
    def for_non_compliance(cls, event: ComplianceEvent) -> "Notification":
        """Entry notification announcing the non-compliant event."""
        return cls(
            subject=NON_COMPLIANCE_SUBJECT,
            body=json.dumps(event.to_detail(), indent=2, sort_keys=True),
        )

    @classmethod
    def for_outcome(cls, outcome: "RemediationOutcome") -> "Notification":
        """Exit notification carrying the outcome message."""
        lines = [outcome.message, ""]
        if outcome.directive is not RemediationDirective.UNKNOWN:
            lines.append(f"Remediation: {outcome.directive.value}")
        else:
            lines.append(f"Config rule: {outcome.config_rule_name or '<none>'}")
        lines.append(f"Resource: {outcome.resource_id or '<none>'}")
        if outcome.execution_id:
            lines.append(f"Execution: {outcome.execution_id}")
        return cls(subject=outcome.message, body="\n".join(lines))


@dataclass(frozen=True)
class RemediationOutcome:
    """
    Tagged result of one workflow execution.

    ``directive`` is kept on the not-found outcome so the exit notification
    can name the remediation that could not run.
    """
    kind: OutcomeKind
    message: str
    directive: RemediationDirective
    resource_id: str = ""
    config_rule_name: str = ""
    execution_id: str = ""
    states: List[str] = field(default_factory=list)
    dry_run: bool = False

    @classmethod
    def executed(cls, directive: RemediationDirective, resource_id: str) -> "RemediationOutcome":
        return cls(
            kind=OutcomeKind.EXECUTED,
            message=REMEDIATION_EXECUTED_MESSAGE,
            directive=directive,
            resource_id=resource_id,
            config_rule_name=directive.value,
        )

    @classmethod
    def resource_not_found(
        cls, directive: RemediationDirective, identifier: Optional[str]
    ) -> "RemediationOutcome":
        return cls(
            kind=OutcomeKind.RESOURCE_NOT_FOUND,
            message=RESOURCE_NOT_FOUND_MESSAGE,
            directive=directive,
            resource_id=identifier or "",
            config_rule_name=directive.value,
        )

    @classmethod
    def unknown_directive(cls, config_rule_name: str, resource_id: str = "") -> "RemediationOutcome":
        return cls(
            kind=OutcomeKind.UNKNOWN_DIRECTIVE,
            message=REMEDIATION_TYPE_NOT_FOUND_MESSAGE,
            directive=RemediationDirective.UNKNOWN,
            resource_id=resource_id,
            config_rule_name=config_rule_name,
        )

    @property
    def identifier(self) -> Optional[str]:
        """Identifier that could not be resolved (not-found outcomes only)."""
        if self.kind is OutcomeKind.RESOURCE_NOT_FOUND:
            return self.resource_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "outcome": self.kind.value,
            "message": self.message,
            "directive": self.directive.value,
            "resource_id": self.resource_id,
            "config_rule_name": self.config_rule_name,
            "execution_id": self.execution_id,
            "states": list(self.states),
            "dry_run": self.dry_run,
        }
