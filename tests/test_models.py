"""
Tests for data models.
"""

import json

import pytest
from pydantic import ValidationError

from docdb_remediation.constants import NON_COMPLIANCE_SUBJECT
from docdb_remediation.models import (
    ComplianceEvent,
    ComplianceType,
    Notification,
    OutcomeKind,
    RemediationDirective,
    RemediationOutcome,
    ResourceType,
)


def test_event_from_config_detail():
    """Test parsing the detail of an AWS Config notification."""
    event = ComplianceEvent.model_validate({
        "configRuleName": "documentdb-cluster-parameter-group",
        "resourceType": "AWS::RDS::DBCluster",
        "resourceId": "cluster-ABC",
        "awsRegion": "eu-west-1",
        "notificationCreationTime": "2023-03-01T10:15:30.000Z",
        "newEvaluationResult": {"complianceType": "NON_COMPLIANT"},
    })

    assert event.config_rule_name == "documentdb-cluster-parameter-group"
    assert event.resource_type == ResourceType.CLUSTER
    assert event.resource_id == "cluster-ABC"
    assert event.compliance_type == ComplianceType.NON_COMPLIANT
    assert event.aws_region == "eu-west-1"
    assert event.notification_time.year == 2023


@pytest.mark.parametrize("raw,expected", [
    ("AWS::RDS::DBInstance", ResourceType.INSTANCE),
    ("Cluster", ResourceType.CLUSTER),
    ("instance", ResourceType.INSTANCE),
])
def test_event_resource_type_aliases(raw, expected):
    event = ComplianceEvent(configRuleName="r", resourceType=raw)
    assert event.resource_type == expected


def test_event_defaults():
    event = ComplianceEvent()

    assert event.config_rule_name == ""
    assert event.resource_id == ""
    assert event.resource_type == ResourceType.CLUSTER
    assert event.compliance_type == ComplianceType.NON_COMPLIANT


def test_event_top_level_compliance_type_wins():
    event = ComplianceEvent.model_validate({
        "complianceType": "COMPLIANT",
        "newEvaluationResult": {"complianceType": "NON_COMPLIANT"},
    })
    assert event.compliance_type == ComplianceType.COMPLIANT


def test_event_is_immutable():
    event = ComplianceEvent(configRuleName="r", resourceId="db-1")

    with pytest.raises(ValidationError):
        event.resource_id = "db-2"


def test_event_rejects_unknown_resource_type():
    with pytest.raises(ValidationError):
        ComplianceEvent(resourceType="AWS::S3::Bucket")


def test_event_coerces_non_string_resource_id():
    assert ComplianceEvent(resourceId=123).resource_id == "123"


def test_event_bad_timestamp_is_dropped():
    assert ComplianceEvent(notificationCreationTime="not a time").notification_time is None


def test_event_to_detail_uses_wire_names():
    detail = ComplianceEvent(configRuleName="r", resourceId="db-1").to_detail()

    assert detail["configRuleName"] == "r"
    assert detail["resourceType"] == "Cluster"
    assert "awsRegion" not in detail


def test_outcome_factories():
    executed = RemediationOutcome.executed(RemediationDirective.BACKUP_RETENTION, "db-1")
    missing = RemediationOutcome.resource_not_found(RemediationDirective.PARAMETER_GROUP, "db-2")
    unknown = RemediationOutcome.unknown_directive("documentdb-other", "db-3")

    assert executed.kind == OutcomeKind.EXECUTED
    assert executed.identifier is None
    assert missing.kind == OutcomeKind.RESOURCE_NOT_FOUND
    assert missing.identifier == "db-2"
    assert unknown.directive == RemediationDirective.UNKNOWN
    assert unknown.config_rule_name == "documentdb-other"


def test_outcome_to_dict():
    data = RemediationOutcome.unknown_directive("documentdb-other").to_dict()

    assert data["outcome"] == "unknown_directive"
    assert data["directive"] == "unknown"
    assert json.dumps(data)


def test_entry_notification_carries_event():
    event = ComplianceEvent(configRuleName="documentdb-x", resourceId="db-7")

    notification = Notification.for_non_compliance(event)

    assert notification.subject == NON_COMPLIANCE_SUBJECT
    assert json.loads(notification.body)["resourceId"] == "db-7"


def test_exit_notification_names_remediation():
    outcome = RemediationOutcome.resource_not_found(RemediationDirective.BACKUP_RETENTION, "db-9")

    notification = Notification.for_outcome(outcome)

    assert notification.subject == outcome.message
    assert "documentdb-cluster-backup-retention" in notification.body
    assert "db-9" in notification.body


def test_exit_notification_for_unknown_rule():
    outcome = RemediationOutcome.unknown_directive("documentdb-other")

    body = Notification.for_outcome(outcome).body

    assert "Config rule: documentdb-other" in body
    assert "Resource: <none>" in body
