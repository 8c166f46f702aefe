"""
Shared fixtures: in-memory control plane and recording notifier.
"""
from typing import Any, Dict, List, Optional, Tuple

import pytest

from docdb_remediation.alerting.notifiers import Notifier
from docdb_remediation.exceptions import TransportError
from docdb_remediation.integrations.base import ControlPlane
from docdb_remediation.metrics import metrics
from docdb_remediation.models import Notification, ResourceRecord, ResourceType
from docdb_remediation.remediation.actions import (
    BackupRetentionRemediation,
    DeletionProtectionRemediation,
    ParameterGroupRemediation,
)
from docdb_remediation.remediation.resolver import ResourceResolver
from docdb_remediation.remediation.workflow import RemediationWorkflow


class InMemoryControlPlane(ControlPlane):
    """Control plane keeping resources and their configuration in memory."""

    def __init__(self, resources: Optional[List[ResourceRecord]] = None):
        self.resources = list(resources or [])
        self.list_calls: List[ResourceType] = []
        self.apply_calls: List[Tuple[str, str, Any]] = []
        self.fail_apply: Optional[str] = None

    def add_cluster(self, identifier: str, name: str, **attributes) -> ResourceRecord:
        record = ResourceRecord(identifier, name, ResourceType.CLUSTER, dict(attributes))
        self.resources.append(record)
        return record

    def list_resources(self, resource_type: ResourceType) -> List[ResourceRecord]:
        self.list_calls.append(resource_type)
        return [r for r in self.resources if r.resource_type == resource_type]

    def apply_configuration(self, current_name, field, value, resource_type=ResourceType.CLUSTER):
        self.apply_calls.append((current_name, field, value))
        if self.fail_apply:
            raise TransportError("modify_db_cluster", self.fail_apply)
        for record in self.resources:
            if record.current_name == current_name and record.resource_type == resource_type:
                record.attributes[field] = value

    def attributes_of(self, identifier: str) -> Dict[str, Any]:
        return next(r.attributes for r in self.resources if r.identifier == identifier)


class RecordingNotifier(Notifier):
    """Notifier that keeps every notification it is asked to send."""

    def __init__(self, fail_on_subject: Optional[str] = None):
        self.sent: List[Notification] = []
        self.fail_on_subject = fail_on_subject

    def send(self, notification: Notification) -> None:
        if self.fail_on_subject and notification.subject == self.fail_on_subject:
            raise TransportError("sns:Publish", "topic unavailable")
        self.sent.append(notification)


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def control_plane():
    plane = InMemoryControlPlane()
    plane.add_cluster("db-123", "orders-cluster", DeletionProtection=False)
    plane.add_cluster("db-456", "inventory-cluster", BackupRetentionPeriod=1)
    return plane


@pytest.fixture
def notifier():
    return RecordingNotifier()


def make_workflow(
    control_plane: ControlPlane,
    notifier: Notifier,
    parameter_group: Optional[str] = "compliant-params",
    retention: Optional[int] = 7,
    dry_run: bool = False
) -> RemediationWorkflow:
    resolver = ResourceResolver(control_plane)
    return RemediationWorkflow(
        [
            ParameterGroupRemediation(resolver, control_plane, parameter_group, dry_run=dry_run),
            BackupRetentionRemediation(resolver, control_plane, retention, dry_run=dry_run),
            DeletionProtectionRemediation(resolver, control_plane, dry_run=dry_run),
        ],
        notifier,
    )


@pytest.fixture
def workflow(control_plane, notifier):
    return make_workflow(control_plane, notifier)


def config_event(rule: str, resource_id: Optional[str] = "db-123", **extra) -> Dict[str, Any]:
    """EventBridge envelope for an AWS Config compliance change."""
    detail = {
        "resourceId": resource_id,
        "awsRegion": "us-east-1",
        "awsAccountId": "123456789012",
        "configRuleName": rule,
        "messageType": "ComplianceChangeNotification",
        "notificationCreationTime": "2023-03-01T10:15:30.000Z",
        "resourceType": "AWS::RDS::DBCluster",
        "newEvaluationResult": {"complianceType": "NON_COMPLIANT"},
    }
    detail.update(extra)
    return {
        "version": "0",
        "source": "aws.config",
        "detail-type": "Config Rules Compliance Change",
        "detail": detail,
    }
