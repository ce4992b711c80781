"""
DtoType Value Object

Closed set of DTO kinds. Every operation branches on this tag explicitly:
custom object DTOs take properties, custom enums take members, and every
other kind is a default DTO whose shape is owned by the shape oracle.
"""

from enum import Enum


class DtoType(str, Enum):
    """Kind of a ModuleDto."""

    CUSTOM = "Custom"
    CUSTOM_ENUM = "CustomEnum"

    # Default DTOs mirroring an entity
    ENTITY = "Entity"
    CREATE_INPUT = "CreateInput"
    UPDATE_INPUT = "UpdateInput"
    WHERE_INPUT = "WhereInput"
    WHERE_UNIQUE_INPUT = "WhereUniqueInput"
    ORDER_BY_INPUT = "OrderByInput"
    COUNT_ARGS = "CountArgs"
    FIND_MANY_ARGS = "FindManyArgs"
    FIND_ONE_ARGS = "FindOneArgs"
    CREATE_ARGS = "CreateArgs"
    UPDATE_ARGS = "UpdateArgs"
    DELETE_ARGS = "DeleteArgs"

    # Default DTO for a many-to-one relation
    CREATE_NESTED_MANY_INPUT = "CreateNestedManyInput"

    # Default DTO for an enum field
    ENUM = "Enum"

    def accepts_properties(self) -> bool:
        return self is DtoType.CUSTOM

    def accepts_members(self) -> bool:
        return self is DtoType.CUSTOM_ENUM


class PropertyType(str, Enum):
    """Type of a single ModuleDtoProperty type descriptor."""

    STRING = "String"
    INTEGER = "Integer"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATE_TIME = "DateTime"
    JSON = "Json"
    DTO = "Dto"
    ENUM = "Enum"


class SettingsField(str, Enum):
    """Keys of a DTO's settings that can be queried."""

    DTO_TYPE = "dto_type"
    RELATED_ENTITY_ID = "related_entity_id"
    RELATED_FIELD_ID = "related_field_id"
