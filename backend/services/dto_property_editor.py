"""
DTO Property Editor

Edits the property list of custom object DTOs and the member list of custom
enum DTOs. Each edit is a read-modify-write of the whole list: read a fresh
snapshot, mutate its copy, then write it back conditioned on the version
that was read. When another writer got there first the edit is replayed on
a new snapshot, up to DtoSettings.max_edit_attempts times.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from config.dto_config import DtoSettings
from dtos.request.module_dto_request import (
    CreateModuleDtoEnumMemberRequest,
    CreateModuleDtoPropertyRequest,
    UpdateModuleDtoEnumMemberRequest,
    UpdateModuleDtoPropertyRequest,
)
from exceptions import ConflictError, ForbiddenError, NotFoundError, StaleVersionError
from repositories.module_dto_repository import ModuleDtoRepository
from schemas import ModuleDto, ModuleDtoEnumMember, ModuleDtoProperty
from services.name_validator import NameValidator
from utils.logging_utils import StructuredLogger

logger = StructuredLogger(__name__)

# mutate(dto) -> (result returned to the caller, settings changes to write)
Mutation = Callable[[ModuleDto], Tuple[Any, Dict[str, Any]]]


def _index_of(items: List[Any], name: str) -> int:
    for index, item in enumerate(items):
        if item.name == name:
            return index
    return -1


class DtoPropertyEditor:
    """Adds, updates and removes DTO properties and enum members."""

    def __init__(
        self,
        db: Session,
        settings: DtoSettings,
        repository: Optional[ModuleDtoRepository] = None,
    ):
        self.db = db
        self.settings = settings
        self.repo = repository or ModuleDtoRepository(db)

    def _load(self, dto_id: str) -> ModuleDto:
        dto = self.repo.find_one(dto_id)
        if dto is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)
        return dto

    def _apply(self, dto_id: str, check: Callable[[ModuleDto], None], mutate: Mutation) -> Any:
        """
        Run one read-modify-write edit with optimistic retries.

        Args:
            dto_id: DTO to edit
            check: Raises when the DTO's kind does not allow the edit
            mutate: Builds the result and the changed settings from a snapshot

        Returns:
            Whatever mutate produced on the attempt that was written

        Raises:
            StaleVersionError: If every attempt lost the race
        """
        attempts = max(1, self.settings.max_edit_attempts)

        for attempt in range(1, attempts + 1):
            dto = self._load(dto_id)
            check(dto)
            result, changes = mutate(dto)

            try:
                self.repo.update(
                    dto.id,
                    {"name": dto.name, "enabled": dto.enabled, **changes},
                    expected_version=dto.version,
                )
                return result
            except StaleVersionError:
                if attempt == attempts:
                    logger.warning(f"Giving up edit after {attempts} attempt(s)", extra={
                        "dto_id": dto_id,
                    })
                    raise
                logger.debug(f"DTO changed concurrently, retrying edit (attempt {attempt})", extra={
                    "dto_id": dto_id,
                })

    @staticmethod
    def _require_custom_object(message: str) -> Callable[[ModuleDto], None]:
        def check(dto: ModuleDto) -> None:
            if not dto.dto_type.accepts_properties():
                raise ForbiddenError(message, dto_type=dto.dto_type.value)
        return check

    @staticmethod
    def _require_custom_enum(message: str) -> Callable[[ModuleDto], None]:
        def check(dto: ModuleDto) -> None:
            if not dto.dto_type.accepts_members():
                raise ForbiddenError(message, dto_type=dto.dto_type.value)
        return check

    # Properties

    def add_property(self, request: CreateModuleDtoPropertyRequest) -> ModuleDtoProperty:
        """
        Append a new String property to a custom DTO.

        Returns:
            The new property

        Raises:
            NotFoundError: If the DTO does not exist
            ForbiddenError: If the DTO is not a custom object DTO
            ConflictError: If the DTO already has a property of that name
        """
        def mutate(dto: ModuleDto):
            if _index_of(dto.properties, request.name) >= 0:
                raise ConflictError(
                    f"Property already exists, name: {request.name}, DTO ID: {dto.id}",
                    name=request.name, dto_id=dto.id
                )
            prop = ModuleDtoProperty(name=request.name)
            return prop, {"properties": [*dto.properties, prop]}

        prop = self._apply(
            request.dto_id,
            self._require_custom_object("Properties can only be added to custom DTOs"),
            mutate,
        )
        logger.info(f"Added property {prop.name}", extra={"dto_id": request.dto_id})
        return prop

    def update_property(
        self,
        dto_id: str,
        property_name: str,
        patch: UpdateModuleDtoPropertyRequest
    ) -> ModuleDtoProperty:
        """
        Merge a patch over an existing property.

        Fields left unset on the patch keep their stored value. A rename must
        not collide with another property of the same DTO.

        Raises:
            NotFoundError: If the DTO or the property does not exist
            ForbiddenError: If the DTO is not a custom object DTO
            ConflictError: If the new name is taken by a sibling property
        """
        changes = patch.model_dump(exclude_none=True)

        def mutate(dto: ModuleDto):
            index = _index_of(dto.properties, property_name)
            if index < 0:
                raise NotFoundError(
                    f"Property not found, name: {property_name}, DTO ID: {dto.id}",
                    dto_id=dto.id
                )
            new_name = changes.get("name", property_name)
            if new_name != property_name and _index_of(dto.properties, new_name) >= 0:
                raise ConflictError(
                    f"Property already exists, name: {new_name}, DTO ID: {dto.id}",
                    name=new_name, dto_id=dto.id
                )

            merged = ModuleDtoProperty.model_validate({
                **dto.properties[index].model_dump(),
                **changes,
            })
            properties = list(dto.properties)
            properties[index] = merged
            return merged, {"properties": properties}

        return self._apply(
            dto_id,
            self._require_custom_object("Properties can only be updated on custom DTOs"),
            mutate,
        )

    def delete_property(self, dto_id: str, property_name: str) -> ModuleDtoProperty:
        """
        Remove a property from a custom DTO.

        Returns:
            The removed property

        Raises:
            NotFoundError: If the DTO or the property does not exist
            ForbiddenError: If the DTO is not a custom object DTO
        """
        def mutate(dto: ModuleDto):
            index = _index_of(dto.properties, property_name)
            if index < 0:
                raise NotFoundError(
                    f"Property not found, name: {property_name}, DTO ID: {dto.id}",
                    dto_id=dto.id
                )
            properties = list(dto.properties)
            removed = properties.pop(index)
            return removed, {"properties": properties}

        removed = self._apply(
            dto_id,
            self._require_custom_object("Properties can only be deleted from custom DTOs"),
            mutate,
        )
        logger.info(f"Deleted property {removed.name}", extra={"dto_id": dto_id})
        return removed

    # Enum members

    def add_enum_member(self, request: CreateModuleDtoEnumMemberRequest) -> ModuleDtoEnumMember:
        """
        Append a member to a custom enum; its value starts equal to its name.

        Raises:
            NotFoundError: If the DTO does not exist
            ForbiddenError: If the DTO is not a custom enum
            InvalidNameError: If the member name breaks the identifier syntax
            ConflictError: If the enum already has a member of that name
        """
        NameValidator.validate_enum_member_name(request.name)

        def mutate(dto: ModuleDto):
            if _index_of(dto.members, request.name) >= 0:
                raise ConflictError(
                    f"Enum member already exists, name: {request.name}, DTO ID: {dto.id}",
                    name=request.name, dto_id=dto.id
                )
            member = ModuleDtoEnumMember(name=request.name, value=request.name)
            return member, {"members": [*dto.members, member]}

        member = self._apply(
            request.dto_id,
            self._require_custom_enum("Enum members can only be added to custom Enum DTOs"),
            mutate,
        )
        logger.info(f"Added enum member {member.name}", extra={"dto_id": request.dto_id})
        return member

    def update_enum_member(
        self,
        dto_id: str,
        member_name: str,
        patch: UpdateModuleDtoEnumMemberRequest
    ) -> ModuleDtoEnumMember:
        """
        Rename a member and/or change its value.

        Raises:
            NotFoundError: If the DTO or the member does not exist
            ForbiddenError: If the DTO is not a custom enum
            InvalidNameError / ConflictError: If the new name is unusable
        """
        changes = patch.model_dump(exclude_none=True)
        if "name" in changes:
            NameValidator.validate_enum_member_name(changes["name"])

        def mutate(dto: ModuleDto):
            index = _index_of(dto.members, member_name)
            if index < 0:
                raise NotFoundError(
                    f"Enum member not found, name: {member_name}, DTO ID: {dto.id}",
                    dto_id=dto.id
                )
            new_name = changes.get("name", member_name)
            if new_name != member_name and _index_of(dto.members, new_name) >= 0:
                raise ConflictError(
                    f"Enum member already exists, name: {new_name}, DTO ID: {dto.id}",
                    name=new_name, dto_id=dto.id
                )

            merged = ModuleDtoEnumMember.model_validate({
                **dto.members[index].model_dump(),
                **changes,
            })
            members = list(dto.members)
            members[index] = merged
            return merged, {"members": members}

        return self._apply(
            dto_id,
            self._require_custom_enum("Enum members can only be updated on custom Enum DTOs"),
            mutate,
        )

    def delete_enum_member(self, dto_id: str, member_name: str) -> ModuleDtoEnumMember:
        """
        Remove a member from a custom enum.

        Returns:
            The removed member

        Raises:
            NotFoundError: If the DTO or the member does not exist
            ForbiddenError: If the DTO is not a custom enum
        """
        def mutate(dto: ModuleDto):
            index = _index_of(dto.members, member_name)
            if index < 0:
                raise NotFoundError(
                    f"Enum member not found, name: {member_name}, DTO ID: {dto.id}",
                    dto_id=dto.id
                )
            members = list(dto.members)
            removed = members.pop(index)
            return removed, {"members": members}

        removed = self._apply(
            dto_id,
            self._require_custom_enum("Enum members can only be deleted from custom Enum DTOs"),
            mutate,
        )
        logger.info(f"Deleted enum member {removed.name}", extra={"dto_id": dto_id})
        return removed
