"""
Module DTO Specifications

Concrete specifications for selecting DTO blocks by their settings and by
their container. Settings predicates only accept the fields listed in
SettingsField, so every query the services run is typed.

A settings key that is absent never satisfies SettingsEquals and always
satisfies SettingsNot, in memory and in SQL alike.
"""

from typing import Any, Iterable, List, Optional

from sqlalchemy import func

from constants import BlockType
from domain.value_objects.dto_type import DtoType, SettingsField
from models import Block
from schemas import ModuleDto
from .specifications import Specification, AndSpecification, OrSpecification, combine, filter_by_spec, AND


def _settings_value(dto: ModuleDto, field: SettingsField) -> Optional[str]:
    value = getattr(dto, field.value)
    if isinstance(value, DtoType):
        return value.value
    return value


def _settings_column(field: SettingsField):
    return Block.settings[field.value].as_string()


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, DtoType) else value


class ModuleDtoBlockSpec(Specification[ModuleDto]):
    """Block is a module DTO (the store holds other block types too)."""

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        return True

    def to_sql_filter(self):
        return Block.block_type == BlockType.MODULE_DTO.value


class SettingsEquals(Specification[ModuleDto]):
    """Settings field equals a value."""

    def __init__(self, field: SettingsField, value: Any):
        self.field = SettingsField(field)
        self.value = _plain(value)

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        actual = _settings_value(dto, self.field)
        return actual is not None and actual == self.value

    def to_sql_filter(self):
        column = _settings_column(self.field)
        return column.is_not(None) & (column == self.value)

    def __repr__(self) -> str:
        return f"SettingsEquals({self.field.value}={self.value!r})"


class SettingsNot(Specification[ModuleDto]):
    """Settings field is missing or differs from a value."""

    def __init__(self, field: SettingsField, value: Any):
        self.field = SettingsField(field)
        self.value = _plain(value)

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        actual = _settings_value(dto, self.field)
        return actual is None or actual != self.value

    def to_sql_filter(self):
        column = _settings_column(self.field)
        return column.is_(None) | (column != self.value)

    def __repr__(self) -> str:
        return f"SettingsNot({self.field.value}!={self.value!r})"


def settings_predicate(field: SettingsField, equals: Any = None, not_: Any = None) -> Specification[ModuleDto]:
    """
    Build a single settings predicate.

    Exactly one of equals / not_ must be given.
    """
    if (equals is None) == (not_ is None):
        raise ValueError("settings_predicate takes exactly one of equals / not_")
    if equals is not None:
        return SettingsEquals(field, equals)
    return SettingsNot(field, not_)


def filter_by_settings(
    dtos: Iterable[ModuleDto],
    predicates: Iterable[Specification[ModuleDto]],
    combinator: str = AND,
) -> List[ModuleDto]:
    """Return the DTOs whose settings satisfy the combined predicates."""
    return filter_by_spec(dtos, combine(predicates, combinator))


class InModuleSpec(Specification[ModuleDto]):
    """DTO belongs to a module."""

    def __init__(self, module_id: str):
        self.module_id = module_id

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        return dto.parent_block_id == self.module_id

    def to_sql_filter(self):
        return Block.parent_block_id == self.module_id


class InResourceSpec(Specification[ModuleDto]):
    """DTO belongs to a resource."""

    def __init__(self, resource_id: str):
        self.resource_id = resource_id

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        return dto.resource_id == self.resource_id

    def to_sql_filter(self):
        return Block.resource_id == self.resource_id


class DisplayNameIsSpec(Specification[ModuleDto]):
    """DTO display name matches, ignoring case."""

    def __init__(self, display_name: str):
        self.display_name = display_name

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        return dto.display_name.lower() == self.display_name.lower()

    def to_sql_filter(self):
        return func.lower(Block.display_name) == self.display_name.lower()


class ExcludingIdSpec(Specification[ModuleDto]):
    """DTO is not the given one."""

    def __init__(self, dto_id: str):
        self.dto_id = dto_id

    def is_satisfied_by(self, dto: ModuleDto) -> bool:
        return dto.id != self.dto_id

    def to_sql_filter(self):
        return Block.id != self.dto_id


class CustomDtosSpec(OrSpecification[ModuleDto]):
    """Custom object DTOs and custom enums."""

    def __init__(self):
        super().__init__(
            SettingsEquals(SettingsField.DTO_TYPE, DtoType.CUSTOM),
            SettingsEquals(SettingsField.DTO_TYPE, DtoType.CUSTOM_ENUM),
        )


class DefaultDtosSpec(AndSpecification[ModuleDto]):
    """Every DTO the platform generated."""

    def __init__(self):
        super().__init__(
            SettingsNot(SettingsField.DTO_TYPE, DtoType.CUSTOM),
            SettingsNot(SettingsField.DTO_TYPE, DtoType.CUSTOM_ENUM),
        )


class RelatedEntitySpec(SettingsEquals):
    """Default DTO generated for a relation to the given entity."""

    def __init__(self, related_entity_id: str):
        super().__init__(SettingsField.RELATED_ENTITY_ID, related_entity_id)


class RelatedFieldSpec(SettingsEquals):
    """Default DTO generated for the given enum field (permanent id)."""

    def __init__(self, related_field_id: str):
        super().__init__(SettingsField.RELATED_FIELD_ID, related_field_id)
