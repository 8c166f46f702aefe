"""
Resource resolution.

Translates a durable resource identifier into the resource's current
addressable name. Resolution always queries the control plane: names can
change between evaluation and remediation, so nothing is cached.
"""
import logging
from typing import Optional

from ..exceptions import ResourceNotFoundError
from ..integrations.base import ControlPlane
from ..models import ResolvedResource, ResourceType

logger = logging.getLogger(__name__)


class ResourceResolver:
    """Resolve durable identifiers against the control-plane inventory."""

    def __init__(self, control_plane: ControlPlane):
        self.control_plane = control_plane

    def resolve(
        self,
        identifier: Optional[str],
        resource_type: ResourceType = ResourceType.CLUSTER
    ) -> ResolvedResource:
        """
        Find the current name of a resource.

        Issues a single inventory query; transport failures propagate.

        Args:
            identifier: Durable identifier captured at evaluation time
            resource_type: Type of resource to search

        Returns:
            ResolvedResource with the current name

        Raises:
            ResourceNotFoundError: If no resource has this identifier
        """
        resources = self.control_plane.list_resources(resource_type)

        match = next(
            (r for r in resources if identifier and r.identifier == identifier),
            None
        )
        if match is None:
            logger.warning(
                f"{resource_type.value} with resourceId={identifier} not found "
                f"among {len(resources)} resource(s)"
            )
            raise ResourceNotFoundError(
                identifier,
                f"{resource_type.value} with resourceId={identifier} not found"
            )

        logger.debug(f"Resolved resourceId={identifier} to '{match.current_name}'")
        return ResolvedResource(
            identifier=match.identifier,
            current_name=match.current_name,
            resource_type=resource_type,
        )
