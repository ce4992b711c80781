"""
Module DTO Service

Lifecycle of user-authored DTOs: listing, creating custom DTOs and custom
enums, renaming, toggling and deleting them. Default DTOs are listed here
too but are created and removed only by the DefaultDtoSynchronizer.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from config.dto_config import DtoSettings
from constants import EventType
from domain.value_objects.dto_type import DtoType
from dtos.internal.schema_descriptors import Requester
from dtos.request.module_dto_request import (
    CreateModuleDtoRequest,
    FindManyModuleDtoRequest,
    UpdateModuleDtoRequest,
)
from exceptions import ConflictError, ForbiddenError, NotFoundError
from repositories.dto_specifications import (
    CustomDtosSpec,
    DefaultDtosSpec,
    DisplayNameIsSpec,
    ExcludingIdSpec,
    InModuleSpec,
    InResourceSpec,
)
from repositories.module_dto_repository import ModuleDtoRepository
from repositories.specifications import combine
from schemas import ModuleDto, ModuleDtoRevision
from services.analytics_tracker import AnalyticsTracker
from services.interfaces import IEntitlementGate
from services.name_validator import NameValidator
from utils.logging_utils import StructuredLogger

logger = StructuredLogger(__name__)


class ModuleDtoService:
    """Service for custom DTO lifecycle operations."""

    def __init__(
        self,
        db: Session,
        settings: DtoSettings,
        entitlement_gate: IEntitlementGate,
        analytics: AnalyticsTracker,
        repository: Optional[ModuleDtoRepository] = None,
    ):
        """
        Initialize ModuleDtoService.

        Args:
            db: Database session
            settings: DTO configuration (custom actions flag)
            entitlement_gate: Billing gate checked before every mutation
            analytics: Best-effort event tracker
            repository: Store adapter (defaults to one bound to db)
        """
        self.db = db
        self.settings = settings
        self.entitlement_gate = entitlement_gate
        self.analytics = analytics
        self.repo = repository or ModuleDtoRepository(db)

    @property
    def custom_actions_enabled(self) -> bool:
        return self.settings.custom_actions_enabled

    def _workspace(self, requester: Optional[Requester]) -> Optional[str]:
        return requester.workspace_id if requester else None

    def _check_entitlement(self, requester: Requester) -> None:
        self.entitlement_gate.check_custom_actions_entitlement(self._workspace(requester))

    def find_one(self, dto_id: str) -> Optional[ModuleDto]:
        return self.repo.find_one(dto_id)

    def available_dtos_for_resource(self, resource_id: str) -> List[ModuleDto]:
        """
        Get every DTO, custom and default, of a resource.

        Args:
            resource_id: Resource UUID

        Returns:
            DTOs in creation order
        """
        return self.repo.find_many(InResourceSpec(resource_id))

    def find_many(
        self,
        request: FindManyModuleDtoRequest,
        requester: Optional[Requester] = None
    ) -> List[ModuleDto]:
        """
        List DTOs, optionally restricted to custom or default ones.

        Unset include flags count as true. With both flags true the scope
        filter alone applies; with both false nothing is queried.

        Args:
            request: Scope and include flags
            requester: Caller; when given a search event is tracked

        Returns:
            Matching DTOs
        """
        include_custom = request.include_custom_dtos is not False
        include_default = request.include_default_dtos is not False

        if requester:
            self.analytics.track(EventType.SEARCH_APIS, requester)

        if not include_custom and not include_default:
            return []

        scope = []
        if request.resource_id:
            scope.append(InResourceSpec(request.resource_id))
        if request.parent_block_id:
            scope.append(InModuleSpec(request.parent_block_id))

        if include_custom and not include_default:
            scope.append(CustomDtosSpec())
        elif include_default and not include_custom:
            scope.append(DefaultDtosSpec())

        return self.repo.find_many(combine(scope) if scope else None)

    def validate_module_dto_name(
        self,
        name: str,
        resource_id: Optional[str] = None,
        dto_id: Optional[str] = None
    ) -> None:
        """
        Check a DTO name's syntax and its uniqueness within a resource.

        Display names are compared case-insensitively.

        Args:
            name: Candidate name
            resource_id: Resource to check uniqueness in (syntax only when None)
            dto_id: DTO being renamed, excluded from the uniqueness check

        Raises:
            InvalidNameError: If the name breaks the identifier syntax
            ConflictError: If another DTO of the resource already uses the name
        """
        NameValidator.validate_dto_name(name)

        if not resource_id:
            return

        specs = [InResourceSpec(resource_id), DisplayNameIsSpec(name)]
        if dto_id:
            specs.append(ExcludingIdSpec(dto_id))

        if self.repo.count(combine(specs)) > 0:
            raise ConflictError("Invalid DTO name, name already exists", name=name)

    def _create_custom(
        self,
        request: CreateModuleDtoRequest,
        requester: Requester,
        dto_type: DtoType
    ) -> Optional[ModuleDto]:
        if not self.custom_actions_enabled:
            logger.debug("Custom actions disabled, skipping DTO creation", extra={
                "resource_id": request.resource_id,
            })
            return None

        self._check_entitlement(requester)
        self.validate_module_dto_name(request.name, request.resource_id)

        dto = self.repo.create(
            name=request.name,
            dto_type=dto_type,
            resource_id=request.resource_id,
            parent_block_id=request.parent_block_id,
            display_name=request.name,
            description=request.description,
            enabled=True,
            properties=[],
            members=[],
        )

        logger.info(f"Created {dto_type.value} DTO {dto.name}", extra={
            "dto_id": dto.id,
            "resource_id": dto.resource_id,
        })
        self.analytics.track(EventType.CREATE_USER_DTO, requester, {
            "name": dto.name,
            "dtoType": dto_type.value,
        })
        return dto

    def create(self, request: CreateModuleDtoRequest, requester: Requester) -> Optional[ModuleDto]:
        """
        Create a custom object DTO.

        dto_type, enabled and properties from the request are ignored.

        Returns:
            Created DTO, or None when custom actions are disabled

        Raises:
            EntitlementError: If the workspace is not entitled
            InvalidNameError: If the name breaks the identifier syntax
            ConflictError: If the display name is taken in the resource
        """
        return self._create_custom(request, requester, DtoType.CUSTOM)

    def create_enum(self, request: CreateModuleDtoRequest, requester: Requester) -> Optional[ModuleDto]:
        """Create a custom enum DTO; same rules as create()."""
        return self._create_custom(request, requester, DtoType.CUSTOM_ENUM)

    def update(
        self,
        dto_id: str,
        request: UpdateModuleDtoRequest,
        requester: Requester
    ) -> ModuleDto:
        """
        Rename, describe or toggle a DTO.

        Only custom DTOs can be renamed; others change enabled/description only.
        display_name always follows name.

        Raises:
            EntitlementError: If the workspace is not entitled
            NotFoundError: If the DTO does not exist
            InvalidNameError / ConflictError: If the new name is unusable
            ForbiddenError: If a non-custom DTO would be renamed
            StaleVersionError: If the DTO changed concurrently
        """
        self._check_entitlement(requester)

        existing = self.repo.find_one(dto_id)
        if existing is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)

        self.validate_module_dto_name(request.name, existing.resource_id, existing.id)

        if existing.dto_type is not DtoType.CUSTOM and existing.name != request.name:
            raise ForbiddenError(
                "Cannot update the name of a default DTO",
                dto_type=existing.dto_type.value
            )

        changes = {"name": request.name, "display_name": request.name}
        if request.description is not None:
            changes["description"] = request.description
        if request.enabled is not None:
            changes["enabled"] = request.enabled

        updated = self.repo.update(existing.id, changes, expected_version=existing.version)

        self.analytics.track(EventType.INTERACT_USER_DTO, requester, {
            "dtoParameters": request.model_dump(exclude_none=True),
            "operation": "edit",
        })
        return updated

    def delete(self, dto_id: str, requester: Requester) -> ModuleDto:
        """
        Delete a custom DTO.

        Default DTOs go away only with the entity, relation or field they
        mirror. Custom enums are not deleted here.

        Raises:
            EntitlementError: If the workspace is not entitled
            NotFoundError: If the DTO does not exist
            ForbiddenError: If the DTO is not a custom DTO
        """
        self._check_entitlement(requester)

        dto = self.repo.find_one(dto_id)
        if dto is None:
            raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)

        if dto.dto_type is not DtoType.CUSTOM:
            raise ForbiddenError(
                "Cannot delete a default DTO. To delete it, you must delete the entity",
                dto_type=dto.dto_type.value
            )

        deleted = self.repo.delete(dto.id)

        logger.info(f"Deleted DTO {deleted.name}", extra={
            "dto_id": deleted.id,
            "resource_id": deleted.resource_id,
        })
        self.analytics.track(EventType.INTERACT_USER_DTO, requester, {
            "name": deleted.name,
            "operation": "delete",
        })
        return deleted

    def history(self, dto_id: str) -> List[ModuleDtoRevision]:
        """Revision trail of a DTO, oldest first."""
        return self.repo.history(dto_id)
