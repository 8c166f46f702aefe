"""
Control-plane capability interface consumed by the remediation actions.
"""
from abc import ABC, abstractmethod
from typing import Any, List

from ..models import ResourceRecord, ResourceType


class ControlPlane(ABC):
    """Narrow view of the managed database control plane."""

    @abstractmethod
    def list_resources(self, resource_type: ResourceType) -> List[ResourceRecord]:
        """
        List all resources of the given type.

        Args:
            resource_type: Cluster or Instance

        Returns:
            Inventory records with durable identifier and current name

        Raises:
            TransportError: If the inventory query fails
        """
        pass

    @abstractmethod
    def apply_configuration(
        self,
        current_name: str,
        field: str,
        value: Any,
        resource_type: ResourceType = ResourceType.CLUSTER
    ) -> None:
        """
        Set a single configuration field on a resource.

        Setting a field to the value it already holds is a no-op.

        Args:
            current_name: Current addressable name of the resource
            field: Control-plane field name
            value: Desired value
            resource_type: Cluster or Instance

        Raises:
            TransportError: If the mutation fails
        """
        pass
