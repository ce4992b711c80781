"""
Default DTO Synchronizer

Keeps the platform-generated DTOs of a module in step with the entity
schema. Each entry point is driven by one schema-change event (entity
created or renamed, relation field added/changed/removed, enum field
added/changed/removed), recomputes the target shapes from the shape oracle
and reconciles them against the stored default DTOs.

Relation DTOs are keyed by related_entity_id and enum DTOs by
related_field_id inside their module; creating twice returns the existing
rows instead of duplicating them.

Entity-level updates only refresh kinds present both in storage and in the
oracle output. Kinds the oracle starts or stops producing are left alone.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from config.dto_config import DtoSettings
from dtos.internal.schema_descriptors import EntityDescriptor, EntityFieldDescriptor
from exceptions import NotFoundError, StaleVersionError
from repositories.dto_specifications import (
    DefaultDtosSpec,
    InModuleSpec,
    RelatedEntitySpec,
    RelatedFieldSpec,
)
from repositories.module_dto_repository import ModuleDtoRepository
from schemas import DefaultDtoShape, ModuleDto
from services.interfaces import IShapeOracle
from utils.logging_utils import StructuredLogger, log_operation

logger = StructuredLogger(__name__)


class DefaultDtoSynchronizer:
    """Creates, refreshes and removes default DTOs from schema events."""

    def __init__(
        self,
        db: Session,
        settings: DtoSettings,
        shape_oracle: IShapeOracle,
        repository: Optional[ModuleDtoRepository] = None,
    ):
        """
        Args:
            db: Database session
            settings: DTO configuration (custom actions flag)
            shape_oracle: Source of default DTO names and kinds
            repository: Store adapter (defaults to one bound to db)
        """
        self.db = db
        self.settings = settings
        self.shape_oracle = shape_oracle
        self.repo = repository or ModuleDtoRepository(db)

    @property
    def custom_actions_enabled(self) -> bool:
        return self.settings.custom_actions_enabled

    def _create_from_shape(
        self,
        shape: DefaultDtoShape,
        entity: EntityDescriptor,
        module_id: str,
        related_entity_id: Optional[str] = None,
        related_field_id: Optional[str] = None,
    ) -> ModuleDto:
        dto = self.repo.create(
            name=shape.name,
            dto_type=shape.dto_type,
            resource_id=entity.resource_id,
            parent_block_id=module_id,
            display_name=shape.name,
            description=shape.description,
            enabled=True,
            related_entity_id=related_entity_id,
            related_field_id=related_field_id,
            properties=[],
            members=[],
        )
        logger.info(f"Created default DTO {dto.name}", extra={
            "dto_id": dto.id,
            "module_id": module_id,
            "dto_type": dto.dto_type.value,
        })
        return dto

    def _refresh_from_shape(self, dto: ModuleDto, shape: DefaultDtoShape) -> ModuleDto:
        """
        Overwrite a default DTO with its new shape, keeping its enabled flag.

        The write is version-checked against the snapshot; when a user toggle
        lands first, the row is re-read and the refresh retried with the new
        flag, up to DtoSettings.max_edit_attempts times.
        """
        attempts = max(1, self.settings.max_edit_attempts)

        for attempt in range(1, attempts + 1):
            try:
                return self.repo.update(dto.id, {
                    "name": shape.name,
                    "display_name": shape.name,
                    "description": shape.description,
                    "dto_type": shape.dto_type,
                    "properties": [],
                    "members": [],
                    "enabled": dto.enabled,
                }, expected_version=dto.version)
            except StaleVersionError:
                if attempt == attempts:
                    logger.warning(f"Giving up refresh after {attempts} attempt(s)", extra={
                        "dto_id": dto.id,
                    })
                    raise
                fresh = self.repo.find_one(dto.id)
                if fresh is None:
                    raise NotFoundError(f"Module DTO not found, ID: {dto.id}", dto_id=dto.id)
                dto = fresh

    @staticmethod
    def _is_many_to_one(related_field: EntityFieldDescriptor) -> bool:
        return related_field.is_lookup() and related_field.lookup.allow_multiple_selection

    def _related_entity_dtos(self, module_id: str, related_entity_id: str) -> List[ModuleDto]:
        return self.repo.find_many(InModuleSpec(module_id) & RelatedEntitySpec(related_entity_id))

    def _enum_field_dtos(self, module_id: str, field_permanent_id: str) -> List[ModuleDto]:
        return self.repo.find_many(InModuleSpec(module_id) & RelatedFieldSpec(field_permanent_id))

    @log_operation("create_default_dtos_for_entity")
    def create_default_dtos_for_entity(
        self,
        entity: EntityDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Create the full default DTO set of a new entity.

        Returns:
            Created DTOs, or [] when custom actions are disabled
        """
        if not self.custom_actions_enabled:
            return []

        shapes = self.shape_oracle.shapes_for_entity(entity)
        return [
            self._create_from_shape(shape, entity, module_id)
            for shape in shapes.values()
            if shape
        ]

    @log_operation("update_default_dtos_for_entity")
    def update_default_dtos_for_entity(
        self,
        entity: EntityDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Refresh the names of an entity's default DTOs after a rename.

        Only stored DTOs whose kind the oracle still produces are updated;
        their enabled flag is kept.

        Returns:
            Updated DTOs, or [] when custom actions are disabled
        """
        if not self.custom_actions_enabled:
            return []

        shapes = self.shape_oracle.shapes_for_entity(entity)
        existing = self.repo.find_many(InModuleSpec(module_id) & DefaultDtosSpec())

        updated = []
        for dto in existing:
            shape = shapes.get(dto.dto_type)
            if not shape:
                continue
            updated.append(self._refresh_from_shape(dto, shape))
        return updated

    @log_operation("create_default_dtos_for_related_entity")
    def create_default_dtos_for_related_entity(
        self,
        entity: EntityDescriptor,
        related_field: EntityFieldDescriptor,
        related_entity: EntityDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Create the default DTOs of a many-to-one relation.

        Returns:
            The existing DTOs when the relation already has them, the created
            ones otherwise; [] when disabled or the relation is not many-to-one
        """
        if not self.custom_actions_enabled:
            return []

        if not self._is_many_to_one(related_field):
            logger.debug("Relation is not many-to-one, no default DTOs", extra={
                "module_id": module_id,
                "field_id": related_field.id,
            })
            return []

        existing = self._related_entity_dtos(module_id, related_entity.id)
        if existing:
            return existing

        shapes = self.shape_oracle.shapes_for_related_entity(entity, related_entity)
        return [
            self._create_from_shape(shape, entity, module_id, related_entity_id=related_entity.id)
            for shape in shapes.values()
            if shape
        ]

    @log_operation("update_default_dtos_for_related_entity")
    def update_default_dtos_for_related_entity(
        self,
        entity: EntityDescriptor,
        related_field: EntityFieldDescriptor,
        related_entity: EntityDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Refresh the default DTOs of a relation after a rename or type change.

        Falls back to creating them when none exist, which happens when the
        relation just became many-to-one.
        """
        if not self.custom_actions_enabled:
            return []

        if not self._is_many_to_one(related_field):
            return []

        shapes = self.shape_oracle.shapes_for_related_entity(entity, related_entity)
        existing = self._related_entity_dtos(module_id, related_entity.id)

        if not existing:
            return self.create_default_dtos_for_related_entity(
                entity, related_field, related_entity, module_id
            )

        updated = []
        for dto in existing:
            shape = shapes.get(dto.dto_type)
            if not shape:
                continue
            updated.append(self._refresh_from_shape(dto, shape))
        return updated

    @log_operation("delete_default_dtos_for_related_entity")
    def delete_default_dtos_for_related_entity(
        self,
        related_field: EntityFieldDescriptor,
        related_entity: EntityDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Remove every default DTO of a deleted many-to-one relation.

        Bypasses the custom-only guard of ModuleDtoService.delete.

        Returns:
            Deleted DTOs ([] when the relation was not many-to-one)
        """
        if not self._is_many_to_one(related_field):
            return []

        deleted = [
            self.repo.delete(dto.id)
            for dto in self._related_entity_dtos(module_id, related_entity.id)
        ]
        if deleted:
            logger.info(f"Deleted {len(deleted)} relation DTO(s)", extra={
                "module_id": module_id,
                "related_entity_id": related_entity.id,
            })
        return deleted

    @log_operation("create_default_dto_for_enum_field")
    def create_default_dto_for_enum_field(
        self,
        entity: EntityDescriptor,
        enum_field: EntityFieldDescriptor,
        module_id: str
    ) -> Optional[ModuleDto]:
        """
        Create the default enum DTO of an option-set field.

        Returns:
            The existing DTO when the field already has one, the created DTO
            otherwise; None when custom actions are disabled
        """
        if not self.custom_actions_enabled:
            return None

        existing = self._enum_field_dtos(module_id, enum_field.permanent_id)
        if existing:
            return existing[0]

        shape = self.shape_oracle.shape_for_enum_field(entity, enum_field)
        return self._create_from_shape(
            shape, entity, module_id, related_field_id=enum_field.permanent_id
        )

    @log_operation("update_default_dto_for_enum_field")
    def update_default_dto_for_enum_field(
        self,
        entity: EntityDescriptor,
        enum_field: EntityFieldDescriptor,
        module_id: str
    ) -> Optional[ModuleDto]:
        """
        Refresh the default enum DTO of a field, creating it when missing.

        Returns:
            Updated or created DTO; None when custom actions are disabled
        """
        if not self.custom_actions_enabled:
            return None

        shape = self.shape_oracle.shape_for_enum_field(entity, enum_field)
        existing = self._enum_field_dtos(module_id, enum_field.permanent_id)

        if not existing:
            return self.create_default_dto_for_enum_field(entity, enum_field, module_id)

        return self._refresh_from_shape(existing[0], shape)

    @log_operation("delete_default_dto_for_enum_field")
    def delete_default_dto_for_enum_field(
        self,
        enum_field: EntityFieldDescriptor,
        module_id: str
    ) -> List[ModuleDto]:
        """
        Remove the default enum DTO(s) of a deleted field.

        Every match is removed in case duplicates slipped in.
        """
        return [
            self.repo.delete(dto.id)
            for dto in self._enum_field_dtos(module_id, enum_field.permanent_id)
        ]
