"""
Internal Schema Descriptors

DTOs describing the entity schema events delivered to the synchronizer, and
the requester on whose behalf a lifecycle call runs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


LOOKUP_DATA_TYPE = "Lookup"


@dataclass
class LookupProperties:
    """
    Relation descriptor of a Lookup field.

    allow_multiple_selection marks the relation as many-to-one from the
    point of view of the DTO platform; only those get default DTOs.
    """

    related_entity_id: Optional[str] = None
    allow_multiple_selection: bool = False
    related_field_id: Optional[str] = None

    @classmethod
    def from_properties(cls, properties: Optional[Dict[str, Any]]) -> "LookupProperties":
        """Read the lookup keys out of a field's free-form properties."""
        properties = properties or {}
        return cls(
            related_entity_id=properties.get("relatedEntityId"),
            allow_multiple_selection=bool(properties.get("allowMultipleSelection", False)),
            related_field_id=properties.get("relatedFieldId"),
        )


@dataclass
class EntityFieldDescriptor:
    """
    Field of an entity as delivered by a schema-change event.

    permanent_id survives renames and keys the enum-field default DTO.
    """

    id: str
    permanent_id: str
    name: str
    display_name: str
    data_type: str
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def lookup(self) -> LookupProperties:
        return LookupProperties.from_properties(self.properties)

    def is_lookup(self) -> bool:
        return self.data_type == LOOKUP_DATA_TYPE


@dataclass
class EntityDescriptor:
    """Entity of a resource as delivered by a schema-change event."""

    id: str
    name: str
    display_name: str
    plural_display_name: str
    resource_id: str


@dataclass
class Requester:
    """Caller of a lifecycle operation."""

    user_id: str
    workspace_id: Optional[str] = None
