"""
Amazon DocumentDB control-plane integration.

Lists clusters and instances and applies single-field modifications through
the boto3 ``docdb`` client. Every call is a single bounded attempt; retry
policy belongs to the layer that invokes the workflow.
"""
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DOCDB_ENGINE,
)
from ..exceptions import InvalidConfigError, TransportError
from ..models import ResourceRecord, ResourceType
from .base import ControlPlane

logger = logging.getLogger(__name__)


# Per resource type: (paginated operation, response key, durable id key, name key, modify operation)
_RESOURCE_API = {
    ResourceType.CLUSTER: (
        "describe_db_clusters",
        "DBClusters",
        "DbClusterResourceId",
        "DBClusterIdentifier",
        "modify_db_cluster",
    ),
    ResourceType.INSTANCE: (
        "describe_db_instances",
        "DBInstances",
        "DbiResourceId",
        "DBInstanceIdentifier",
        "modify_db_instance",
    ),
}


def single_attempt_config(
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    read_timeout: int = DEFAULT_READ_TIMEOUT_SECONDS
) -> Config:
    """botocore config allowing exactly one attempt per call, with timeouts."""
    return Config(
        retries={"total_max_attempts": 1, "mode": "standard"},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )


def create_client(
    service: str,
    region: Optional[str] = None,
    profile_name: Optional[str] = None,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    read_timeout: int = DEFAULT_READ_TIMEOUT_SECONDS
):
    """
    Create a boto3 client with single-attempt semantics.

    Args:
        service: AWS service name (e.g. "docdb", "sns")
        region: Optional AWS region (default credential chain otherwise)
        profile_name: Optional AWS profile name
        connect_timeout: Connect timeout in seconds
        read_timeout: Read timeout in seconds

    Returns:
        boto3 client

    Raises:
        InvalidConfigError: If the client cannot be built (no region, unknown profile)
    """
    config = single_attempt_config(connect_timeout, read_timeout)
    try:
        if profile_name:
            session = boto3.Session(profile_name=profile_name)
            return session.client(service, region_name=region, config=config)
        return boto3.client(service, region_name=region, config=config)
    except BotoCoreError as e:
        raise InvalidConfigError(f"Cannot create {service} client: {e}") from e


class DocumentDBControlPlane(ControlPlane):
    """
    Amazon DocumentDB control plane.

    Example:
        >>> plane = DocumentDBControlPlane(region="us-east-1")
        >>> clusters = plane.list_resources(ResourceType.CLUSTER)
        >>> plane.apply_configuration("my-cluster", "DeletionProtection", True)
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile_name: Optional[str] = None,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_timeout: int = DEFAULT_READ_TIMEOUT_SECONDS,
        client: Any = None
    ):
        """
        Initialize DocumentDB control plane.

        Args:
            region: Optional AWS region
            profile_name: Optional AWS profile name
            connect_timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            client: Pre-built docdb client (a new one is created if None)
        """
        self.region = region
        if client is None:
            client = create_client(
                "docdb",
                region=region,
                profile_name=profile_name,
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
            )
        self.client = client
        logger.info(f"Initialized DocumentDB control plane (region={region or 'default'})")

    def list_resources(self, resource_type: ResourceType) -> List[ResourceRecord]:
        operation, key, id_key, name_key, _ = _RESOURCE_API[resource_type]
        records = []

        try:
            paginator = self.client.get_paginator(operation)
            pages = paginator.paginate(
                Filters=[{"Name": "engine", "Values": [DOCDB_ENGINE]}]
            )
            for page in pages:
                for item in page.get(key, []):
                    records.append(ResourceRecord(
                        identifier=item.get(id_key, ""),
                        current_name=item.get(name_key, ""),
                        resource_type=resource_type,
                        attributes=item,
                    ))
        except (ClientError, BotoCoreError) as e:
            raise TransportError(operation, str(e)) from e

        logger.debug(f"{operation} returned {len(records)} {resource_type.value.lower()}(s)")
        return records

    def apply_configuration(
        self,
        current_name: str,
        field: str,
        value: Any,
        resource_type: ResourceType = ResourceType.CLUSTER
    ) -> None:
        _, _, _, name_key, operation = _RESOURCE_API[resource_type]
        params: Dict[str, Any] = {name_key: current_name, field: value}

        try:
            getattr(self.client, operation)(**params)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(operation, str(e)) from e

        logger.info(f"{operation}: {name_key}={current_name} {field}={value}")
