"""
Default DTO Shape Oracle

Naming rules for the DTOs the platform generates next to every entity, every
many-to-one relation and every enum field. Pure functions of the schema
descriptors; the synchronizer treats whatever oracle it is given as the
single source of default DTO names.
"""
import re
from typing import Dict

from domain.value_objects.dto_type import DtoType
from dtos.internal.schema_descriptors import EntityDescriptor, EntityFieldDescriptor
from schemas import DefaultDtoShape
from services.interfaces import IShapeOracle

_WORD_SPLIT = re.compile(r'[^a-zA-Z0-9]+')

# DTO kind -> name template, {entity} is the entity's PascalCase name
ENTITY_DTO_TEMPLATES = {
    DtoType.ENTITY: "{entity}",
    DtoType.CREATE_INPUT: "{entity}CreateInput",
    DtoType.UPDATE_INPUT: "{entity}UpdateInput",
    DtoType.WHERE_INPUT: "{entity}WhereInput",
    DtoType.WHERE_UNIQUE_INPUT: "{entity}WhereUniqueInput",
    DtoType.ORDER_BY_INPUT: "{entity}OrderByInput",
    DtoType.COUNT_ARGS: "{entity}CountArgs",
    DtoType.FIND_MANY_ARGS: "{entity}FindManyArgs",
    DtoType.FIND_ONE_ARGS: "{entity}FindUniqueArgs",
    DtoType.CREATE_ARGS: "Create{entity}Args",
    DtoType.UPDATE_ARGS: "Update{entity}Args",
    DtoType.DELETE_ARGS: "Delete{entity}Args",
}


def pascal_case(value: str) -> str:
    """
    Join the words of value in PascalCase, keeping inner capitals.

    "order items" -> "OrderItems", "first_name" -> "FirstName",
    "orderItems" -> "OrderItems"
    """
    words = [w for w in _WORD_SPLIT.split(value or "") if w]
    return "".join(w[0].upper() + w[1:] for w in words)


class DefaultDtoShapeOracle(IShapeOracle):
    """Shape oracle deriving default DTO names from entity metadata"""

    def shapes_for_entity(self, entity: EntityDescriptor) -> Dict[DtoType, DefaultDtoShape]:
        entity_name = pascal_case(entity.name)
        return {
            dto_type: DefaultDtoShape(
                name=template.format(entity=entity_name),
                dto_type=dto_type,
                description=f"Default {dto_type.value} DTO of {entity.display_name}",
            )
            for dto_type, template in ENTITY_DTO_TEMPLATES.items()
        }

    def shapes_for_related_entity(
        self,
        entity: EntityDescriptor,
        related_entity: EntityDescriptor
    ) -> Dict[DtoType, DefaultDtoShape]:
        name = (
            f"{pascal_case(related_entity.name)}CreateNestedManyWithout"
            f"{pascal_case(entity.plural_display_name)}Input"
        )
        return {
            DtoType.CREATE_NESTED_MANY_INPUT: DefaultDtoShape(
                name=name,
                dto_type=DtoType.CREATE_NESTED_MANY_INPUT,
                description=f"Nested {related_entity.display_name} input of {entity.display_name}",
            )
        }

    def shape_for_enum_field(
        self,
        entity: EntityDescriptor,
        field: EntityFieldDescriptor
    ) -> DefaultDtoShape:
        return DefaultDtoShape(
            name=f"Enum{pascal_case(entity.name)}{pascal_case(field.name)}",
            dto_type=DtoType.ENUM,
            description=f"Options of {entity.display_name}.{field.display_name}",
        )
