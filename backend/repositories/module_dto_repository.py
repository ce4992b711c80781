"""
Module DTO repository: the store adapter over versioned blocks.

Hands out ModuleDto snapshots instead of ORM rows. Every read goes to the
database, and every write is a compare-and-swap on the block's version
followed by a BlockVersion snapshot.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from constants import BlockType
from domain.value_objects.dto_type import DtoType
from exceptions import NotFoundError, StaleVersionError
from models import Block as BlockModel, BlockVersion
from schemas import ModuleDto, ModuleDtoEnumMember, ModuleDtoProperty, ModuleDtoRevision
from .base_repository import BaseRepository
from .dto_specifications import ModuleDtoBlockSpec
from .specifications import Specification

# Keys kept inside Block.settings; everything else is a column
SETTINGS_KEYS = (
    "name",
    "dto_type",
    "enabled",
    "related_entity_id",
    "related_field_id",
    "properties",
    "members",
)
COLUMN_KEYS = ("display_name", "description")


def _dump_items(items) -> List[dict]:
    dumped = []
    for item in items or []:
        if hasattr(item, "model_dump"):
            dumped.append(item.model_dump(mode="json"))
        else:
            dumped.append(dict(item))
    return dumped


def _settings_value(key: str, value: Any) -> Any:
    if key in ("properties", "members"):
        return _dump_items(value)
    if isinstance(value, DtoType):
        return value.value
    return value


class ModuleDtoRepository(BaseRepository[BlockModel]):
    """Repository for ModuleDto blocks."""

    def __init__(self, db: Session):
        super().__init__(db, BlockModel)

    def _scoped(self, spec: Optional[Specification]) -> Specification:
        base = ModuleDtoBlockSpec()
        return base if spec is None else base & spec

    def _load(self, dto_id: str) -> Optional[BlockModel]:
        return self.db.query(self.model).populate_existing().filter(
            self.model.id == dto_id,
            self.model.block_type == BlockType.MODULE_DTO.value
        ).first()

    @staticmethod
    def to_dto(block: BlockModel) -> ModuleDto:
        """Convert a block row to a ModuleDto snapshot."""
        settings = block.settings or {}
        return ModuleDto(
            id=block.id,
            name=settings.get("name") or block.display_name,
            display_name=block.display_name,
            description=block.description,
            dto_type=DtoType(settings["dto_type"]),
            enabled=settings.get("enabled", True),
            related_entity_id=settings.get("related_entity_id"),
            related_field_id=settings.get("related_field_id"),
            properties=[ModuleDtoProperty.model_validate(p) for p in settings.get("properties") or []],
            members=[ModuleDtoEnumMember.model_validate(m) for m in settings.get("members") or []],
            parent_block_id=block.parent_block_id,
            resource_id=block.resource_id,
            version=block.version,
            created_at=block.created_at,
            updated_at=block.updated_at,
        )

    def _snapshot(self, block: BlockModel) -> None:
        block.versions.append(BlockVersion(
            version_number=block.version,
            display_name=block.display_name,
            settings=dict(block.settings or {}),
        ))
        self.db.flush()

    def find_one(self, dto_id: str, spec: Optional[Specification] = None) -> Optional[ModuleDto]:
        """
        Get a DTO by ID.

        Args:
            dto_id: Block UUID
            spec: Optional extra criteria the DTO must also satisfy

        Returns:
            ModuleDto snapshot or None if not found
        """
        block = self._load(dto_id)
        if block is None:
            return None
        dto = self.to_dto(block)
        if spec is not None and not spec.is_satisfied_by(dto):
            return None
        return dto

    def find_many(self, spec: Optional[Specification] = None) -> List[ModuleDto]:
        """
        Get every DTO matching a specification.

        Args:
            spec: Specification to filter by (None returns every DTO)

        Returns:
            ModuleDto snapshots in creation order
        """
        return [self.to_dto(block) for block in self.find_rows(self._scoped(spec))]

    def count(self, spec: Optional[Specification] = None) -> int:
        return super().count(self._scoped(spec))

    def create(
        self,
        name: str,
        dto_type: DtoType,
        resource_id: str,
        parent_block_id: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        enabled: bool = True,
        related_entity_id: Optional[str] = None,
        related_field_id: Optional[str] = None,
        properties: Optional[list] = None,
        members: Optional[list] = None,
    ) -> ModuleDto:
        """
        Store a new DTO block at version 1.

        related_entity_id / related_field_id are only written when given, so
        the keys stay absent on DTOs that are not tied to a relation or field.
        """
        settings: Dict[str, Any] = {
            "name": name,
            "dto_type": DtoType(dto_type).value,
            "enabled": enabled,
            "properties": _dump_items(properties),
            "members": _dump_items(members),
        }
        if related_entity_id is not None:
            settings["related_entity_id"] = related_entity_id
        if related_field_id is not None:
            settings["related_field_id"] = related_field_id

        block = self.add(BlockModel(
            resource_id=resource_id,
            parent_block_id=parent_block_id,
            block_type=BlockType.MODULE_DTO.value,
            display_name=display_name or name,
            description=description,
            settings=settings,
            version=1,
        ))
        self._snapshot(block)
        return self.to_dto(block)

    def update(
        self,
        dto_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> ModuleDto:
        """
        Apply changes to a DTO block.

        The write only lands if the block is still at the version the caller
        read (expected_version) or, when none is given, at the version loaded
        here.

        Args:
            dto_id: Block UUID
            changes: Settings keys and/or display_name/description to overwrite
            expected_version: Version the caller based its changes on

        Returns:
            Updated ModuleDto snapshot

        Raises:
            NotFoundError: If the DTO does not exist
            StaleVersionError: If the DTO moved on since it was read
            ValueError: If changes contains an unknown key
        """
        unknown = set(changes) - set(SETTINGS_KEYS) - set(COLUMN_KEYS)
        if unknown:
            raise ValueError(f"Unknown DTO fields: {', '.join(sorted(unknown))}")

        block = self._load(dto_id)
        if block is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)

        base_version = block.version if expected_version is None else expected_version
        if base_version != block.version:
            raise StaleVersionError(dto_id, base_version, block.version)

        settings = dict(block.settings or {})
        for key in SETTINGS_KEYS:
            if key in changes:
                settings[key] = _settings_value(key, changes[key])

        values: Dict[str, Any] = {
            "settings": settings,
            "version": base_version + 1,
            "updated_at": datetime.utcnow(),
        }
        for key in COLUMN_KEYS:
            if key in changes:
                values[key] = changes[key]

        result = self.db.execute(
            update(BlockModel)
            .where(BlockModel.id == dto_id, BlockModel.version == base_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.expire(block)
            raise StaleVersionError(dto_id, base_version)

        self.db.refresh(block)
        self._snapshot(block)
        return self.to_dto(block)

    def delete(self, dto_id: str) -> ModuleDto:
        """
        Hard-delete a DTO block and its revision history.

        Returns:
            Snapshot of the DTO as it was before deletion

        Raises:
            NotFoundError: If the DTO does not exist
        """
        block = self._load(dto_id)
        if block is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)
        dto = self.to_dto(block)
        self.remove(block)
        return dto

    def history(self, dto_id: str) -> List[ModuleDtoRevision]:
        """
        Get the revision trail of a DTO, oldest first.

        Raises:
            NotFoundError: If the DTO does not exist
        """
        block = self._load(dto_id)
        if block is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)
        return [ModuleDtoRevision.model_validate(version) for version in block.versions]
