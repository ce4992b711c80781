"""
Module DTO Request DTOs

Arguments accepted by the DTO lifecycle manager and the property/member
editor. They describe what the caller asked for; the services decide which
fields are honoured (e.g. dto_type is always forced on create).
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from domain.value_objects.dto_type import DtoType
from schemas import PropertyTypeDef


class FindManyModuleDtoRequest(BaseModel):
    """
    Filter for listing DTOs.

    include_custom_dtos / include_default_dtos default to true when left
    unset; both false yields an empty result without querying.
    """

    resource_id: Optional[str] = Field(None, description="Owning resource")
    parent_block_id: Optional[str] = Field(None, description="Owning module")
    include_custom_dtos: Optional[bool] = Field(None, description="Include Custom and CustomEnum DTOs")
    include_default_dtos: Optional[bool] = Field(None, description="Include platform-generated DTOs")


class CreateModuleDtoRequest(BaseModel):
    """Request DTO for creating a custom DTO or a custom enum."""

    name: str = Field(description="DTO name, also used as display name")
    description: Optional[str] = Field(None, description="Free text description")
    resource_id: str = Field(description="Owning resource")
    parent_block_id: Optional[str] = Field(None, description="Owning module")

    # Accepted for compatibility with older clients, always overridden
    dto_type: Optional[DtoType] = None
    enabled: Optional[bool] = None
    properties: Optional[list] = None


class UpdateModuleDtoRequest(BaseModel):
    """Request DTO for updating a DTO's name, description or enabled flag."""

    name: str = Field(description="New name; must equal the current one for default DTOs")
    description: Optional[str] = None
    enabled: Optional[bool] = None


class CreateModuleDtoPropertyRequest(BaseModel):
    dto_id: str
    name: str


class UpdateModuleDtoPropertyRequest(BaseModel):
    """
    Patch for a single property.

    Only fields the caller actually set are merged over the stored record.
    """

    name: Optional[str] = None
    is_array: Optional[bool] = None
    is_optional: Optional[bool] = None
    property_types: Optional[List[PropertyTypeDef]] = None

    @field_validator("property_types")
    @classmethod
    def validate_property_types(cls, v):
        """A property must keep at least one accepted type."""
        if v is not None and len(v) == 0:
            raise ValueError("property_types must not be empty")
        return v


class CreateModuleDtoEnumMemberRequest(BaseModel):
    dto_id: str
    name: str


class UpdateModuleDtoEnumMemberRequest(BaseModel):
    """Patch for a single enum member; unset fields are left untouched."""

    name: Optional[str] = None
    value: Optional[str] = None
