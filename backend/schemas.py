from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from domain.value_objects.dto_type import DtoType, PropertyType


# Property Schemas
class PropertyTypeDef(BaseModel):
    """One accepted type of a DTO property"""
    type: PropertyType = PropertyType.STRING
    is_array: bool = False
    dto_id: Optional[str] = None  # Target DTO when type is Dto or Enum


class ModuleDtoProperty(BaseModel):
    """Named, typed field of a custom object DTO"""
    name: str
    is_array: bool = False
    is_optional: bool = False
    property_types: List[PropertyTypeDef] = Field(
        default_factory=lambda: [PropertyTypeDef()]
    )


class ModuleDtoEnumMember(BaseModel):
    """Member of a custom enum DTO"""
    name: str
    value: str


# DTO Schemas
class ModuleDto(BaseModel):
    """
    Snapshot of a stored DTO block.

    Repositories hand these out instead of ORM rows; mutating a snapshot
    never touches the database until it is written back.
    """
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    dto_type: DtoType
    enabled: bool = True
    related_entity_id: Optional[str] = None  # Many-to-one relation DTOs only
    related_field_id: Optional[str] = None  # Enum field DTOs only
    properties: List[ModuleDtoProperty] = Field(default_factory=list)
    members: List[ModuleDtoEnumMember] = Field(default_factory=list)
    parent_block_id: Optional[str] = None
    resource_id: str
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=False)


class ModuleDtoRevision(BaseModel):
    """One entry of a DTO's revision history"""
    version_number: int
    display_name: str
    settings: dict
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Shape Oracle Schemas
class DefaultDtoShape(BaseModel):
    """Static name/kind of a default DTO as computed by the shape oracle"""
    name: str
    dto_type: DtoType
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True)
