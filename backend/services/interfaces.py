"""
Service Interfaces

Abstract base classes for the collaborators the DTO services consume but do
not own: the default-DTO shape oracle, the billing entitlement gate and the
analytics sink. Services receive implementations through their constructor,
so tests and hosts can swap any of them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from domain.value_objects.dto_type import DtoType
from dtos.internal.schema_descriptors import EntityDescriptor, EntityFieldDescriptor
from schemas import DefaultDtoShape


class IShapeOracle(ABC):
    """
    Computes the canonical name/kind of default DTOs from schema metadata.

    Implementations must be pure: the same descriptors always yield the same
    shapes, which is what makes re-synchronisation idempotent.
    """

    @abstractmethod
    def shapes_for_entity(self, entity: EntityDescriptor) -> Dict[DtoType, DefaultDtoShape]:
        """
        Default DTOs mirroring an entity.

        Returns:
            Mapping of DTO kind to shape
        """

    @abstractmethod
    def shapes_for_related_entity(
        self,
        entity: EntityDescriptor,
        related_entity: EntityDescriptor
    ) -> Dict[DtoType, DefaultDtoShape]:
        """
        Default DTOs for a many-to-one relation from entity to related_entity.

        Returns:
            Mapping of DTO kind to shape
        """

    @abstractmethod
    def shape_for_enum_field(
        self,
        entity: EntityDescriptor,
        field: EntityFieldDescriptor
    ) -> DefaultDtoShape:
        """Default enum DTO for an option-set field."""


class IEntitlementGate(ABC):
    """
    Billing gate for custom-action features.
    """

    @abstractmethod
    def check_custom_actions_entitlement(self, workspace_id: Optional[str]) -> None:
        """
        Verify the workspace may use custom actions.

        Args:
            workspace_id: Requester's workspace

        Raises:
            EntitlementError: If the workspace is not entitled
        """

    @abstractmethod
    def get_subscription_plan(self, workspace_id: Optional[str]) -> Optional[str]:
        """
        Get the workspace's subscription plan name for analytics.

        Returns:
            Plan name, or None when unknown
        """


class IAnalyticsSink(ABC):
    """
    Fire-and-forget event sink.
    """

    @abstractmethod
    def track(self, event: str, properties: Dict[str, Any]) -> None:
        """
        Record an analytics event.

        Args:
            event: Event name (see constants.EventType)
            properties: Event payload
        """
