"""
Tests for the DocumentDB control plane and notification channels.

boto3 and requests are replaced with mocks.
"""

from unittest.mock import MagicMock

import pytest
import requests
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError, ProfileNotFound

from docdb_remediation.alerting import notifiers
from docdb_remediation.alerting.notifiers import (
    LogNotifier,
    SNSNotifier,
    WebhookNotifier,
    sanitize_subject,
)
from docdb_remediation.exceptions import InvalidConfigError, TransportError
from docdb_remediation.integrations import documentdb
from docdb_remediation.integrations.documentdb import (
    DocumentDBControlPlane,
    create_client,
    single_attempt_config,
)
from docdb_remediation.models import Notification, ResourceType


def client_error(operation="ModifyDBCluster"):
    return ClientError(
        {"Error": {"Code": "InvalidDBClusterStateFault", "Message": "cluster is busy"}},
        operation
    )


@pytest.fixture
def docdb_client():
    client = MagicMock()
    paginator = MagicMock()
    paginator.paginate.return_value = [
        {"DBClusters": [
            {"DbClusterResourceId": "cluster-AAA", "DBClusterIdentifier": "orders", "Engine": "docdb"},
        ]},
        {"DBClusters": [
            {"DbClusterResourceId": "cluster-BBB", "DBClusterIdentifier": "billing", "Engine": "docdb"},
        ]},
    ]
    client.get_paginator.return_value = paginator
    return client


# Control plane
def test_list_clusters_across_pages(docdb_client):
    plane = DocumentDBControlPlane(client=docdb_client)

    records = plane.list_resources(ResourceType.CLUSTER)

    assert [(r.identifier, r.current_name) for r in records] == [
        ("cluster-AAA", "orders"),
        ("cluster-BBB", "billing"),
    ]
    docdb_client.get_paginator.assert_called_once_with("describe_db_clusters")
    docdb_client.get_paginator.return_value.paginate.assert_called_once_with(
        Filters=[{"Name": "engine", "Values": ["docdb"]}]
    )


def test_list_instances_uses_instance_keys():
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"DBInstances": [{"DbiResourceId": "db-XYZ", "DBInstanceIdentifier": "orders-1"}]},
    ]
    plane = DocumentDBControlPlane(client=client)

    records = plane.list_resources(ResourceType.INSTANCE)

    assert records[0].identifier == "db-XYZ"
    assert records[0].current_name == "orders-1"
    assert records[0].resource_type == ResourceType.INSTANCE
    client.get_paginator.assert_called_once_with("describe_db_instances")


def test_list_wraps_client_error(docdb_client):
    docdb_client.get_paginator.return_value.paginate.side_effect = client_error("DescribeDBClusters")
    plane = DocumentDBControlPlane(client=docdb_client)

    with pytest.raises(TransportError) as exc_info:
        plane.list_resources(ResourceType.CLUSTER)

    assert exc_info.value.operation == "describe_db_clusters"
    assert isinstance(exc_info.value.__cause__, ClientError)


def test_apply_configuration_modifies_cluster(docdb_client):
    plane = DocumentDBControlPlane(client=docdb_client)

    plane.apply_configuration("orders", "DeletionProtection", True)

    docdb_client.modify_db_cluster.assert_called_once_with(
        DBClusterIdentifier="orders", DeletionProtection=True
    )


def test_apply_configuration_modifies_instance(docdb_client):
    plane = DocumentDBControlPlane(client=docdb_client)

    plane.apply_configuration("orders-1", "AutoMinorVersionUpgrade", True, ResourceType.INSTANCE)

    docdb_client.modify_db_instance.assert_called_once_with(
        DBInstanceIdentifier="orders-1", AutoMinorVersionUpgrade=True
    )


def test_apply_configuration_wraps_errors(docdb_client):
    docdb_client.modify_db_cluster.side_effect = EndpointConnectionError(endpoint_url="https://rds")
    plane = DocumentDBControlPlane(client=docdb_client)

    with pytest.raises(TransportError, match="modify_db_cluster"):
        plane.apply_configuration("orders", "BackupRetentionPeriod", 7)


def test_single_attempt_config():
    config = single_attempt_config(connect_timeout=2, read_timeout=9)

    assert config.retries == {"total_max_attempts": 1, "mode": "standard"}
    assert config.connect_timeout == 2
    assert config.read_timeout == 9


def test_client_created_with_session_for_profile(monkeypatch):
    session = MagicMock()
    monkeypatch.setattr(documentdb.boto3, "Session", MagicMock(return_value=session))

    DocumentDBControlPlane(region="us-east-1", profile_name="ops")

    documentdb.boto3.Session.assert_called_once_with(profile_name="ops")
    args, kwargs = session.client.call_args
    assert args == ("docdb",)
    assert kwargs["region_name"] == "us-east-1"


def test_client_without_region_is_configuration_error(monkeypatch):
    monkeypatch.setattr(documentdb.boto3, "client", MagicMock(side_effect=NoRegionError()))

    with pytest.raises(InvalidConfigError, match="Cannot create docdb client") as exc_info:
        DocumentDBControlPlane()

    assert isinstance(exc_info.value.__cause__, NoRegionError)


def test_unknown_profile_is_configuration_error(monkeypatch):
    monkeypatch.setattr(
        documentdb.boto3, "Session", MagicMock(side_effect=ProfileNotFound(profile="ops"))
    )

    with pytest.raises(InvalidConfigError, match="ops"):
        create_client("sns", profile_name="ops")


# Notifiers
def test_sanitize_subject():
    assert sanitize_subject("line one\nline two") == "line one line two"
    assert sanitize_subject("café alert") == "caf alert"
    long_subject = sanitize_subject("x" * 150)
    assert len(long_subject) == 100
    assert long_subject.endswith("...")


def test_sns_notifier_publishes():
    client = MagicMock()
    client.publish.return_value = {"MessageId": "m-1"}
    notifier = SNSNotifier("arn:aws:sns:us-east-1:123456789012:compliance", client=client)

    notifier.send(Notification(subject="Subject\nwith newline", body="Body"))

    client.publish.assert_called_once_with(
        TopicArn="arn:aws:sns:us-east-1:123456789012:compliance",
        Subject="Subject with newline",
        Message="Body",
    )


def test_sns_notifier_raises_transport_error():
    client = MagicMock()
    client.publish.side_effect = client_error("Publish")
    notifier = SNSNotifier("arn:aws:sns:us-east-1:123456789012:compliance", client=client)

    with pytest.raises(TransportError, match="sns:Publish"):
        notifier.send(Notification(subject="s", body="b"))


def test_webhook_notifier_posts_json(monkeypatch):
    response = MagicMock()
    post = MagicMock(return_value=response)
    monkeypatch.setattr(notifiers.requests, "post", post)
    notifier = WebhookNotifier("https://hooks.example.com/compliance", timeout=3)

    notifier.send(Notification(subject="s", body="b"))

    post.assert_called_once_with(
        "https://hooks.example.com/compliance",
        json={"subject": "s", "body": "b"},
        headers={},
        timeout=3
    )
    response.raise_for_status.assert_called_once()


def test_webhook_notifier_raises_transport_error(monkeypatch):
    monkeypatch.setattr(
        notifiers.requests, "post",
        MagicMock(side_effect=requests.ConnectionError("refused"))
    )
    notifier = WebhookNotifier("https://hooks.example.com/compliance")

    with pytest.raises(TransportError, match="webhook"):
        notifier.send(Notification(subject="s", body="b"))


def test_log_notifier_logs(caplog):
    with caplog.at_level("INFO"):
        LogNotifier().send(Notification(subject="Remediation type not found", body="details"))

    assert "Remediation type not found" in caplog.text
