"""
Module DTO API Endpoints

REST API for listing and editing module DTOs. Default DTOs are read-only
here apart from their enabled flag; they are maintained by the
DefaultDtoSynchronizer from entity schema events.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from pydantic import BaseModel

from dependencies import (
    get_dto_property_editor,
    get_module_dto_service,
    get_requester,
)
from dtos.internal.schema_descriptors import Requester
from dtos.request.module_dto_request import (
    CreateModuleDtoEnumMemberRequest,
    CreateModuleDtoPropertyRequest,
    CreateModuleDtoRequest,
    FindManyModuleDtoRequest,
    UpdateModuleDtoEnumMemberRequest,
    UpdateModuleDtoPropertyRequest,
    UpdateModuleDtoRequest,
)
from exceptions import NotFoundError
from schemas import ModuleDto, ModuleDtoEnumMember, ModuleDtoProperty, ModuleDtoRevision
from services.dto_property_editor import DtoPropertyEditor
from services.module_dto_service import ModuleDtoService
from utils.error_handlers import handle_api_errors

router = APIRouter()


class NameRequest(BaseModel):
    """Body of property/member creation"""
    name: str


@router.get("/module-dtos", response_model=List[ModuleDto])
@handle_api_errors("List DTOs")
def list_module_dtos(
    resource_id: Optional[str] = Query(None),
    parent_block_id: Optional[str] = Query(None, description="Module ID"),
    include_custom_dtos: Optional[bool] = Query(None),
    include_default_dtos: Optional[bool] = Query(None),
    service: ModuleDtoService = Depends(get_module_dto_service),
    requester: Requester = Depends(get_requester),
):
    request = FindManyModuleDtoRequest(
        resource_id=resource_id,
        parent_block_id=parent_block_id,
        include_custom_dtos=include_custom_dtos,
        include_default_dtos=include_default_dtos,
    )
    return service.find_many(request, requester)


@router.get("/module-dtos/{dto_id}", response_model=ModuleDto)
@handle_api_errors("Get DTO")
def get_module_dto(dto_id: str, service: ModuleDtoService = Depends(get_module_dto_service)):
    dto = service.find_one(dto_id)
    if dto is None:
        raise NotFoundError(f"Module DTO not found, ID: {dto_id}", dto_id=dto_id)
    return dto


@router.get("/module-dtos/{dto_id}/history", response_model=List[ModuleDtoRevision])
@handle_api_errors("Get DTO history")
def get_module_dto_history(dto_id: str, service: ModuleDtoService = Depends(get_module_dto_service)):
    return service.history(dto_id)


@router.post("/module-dtos", response_model=Optional[ModuleDto])
@handle_api_errors("Create DTO")
def create_module_dto(
    request: CreateModuleDtoRequest,
    service: ModuleDtoService = Depends(get_module_dto_service),
    requester: Requester = Depends(get_requester),
):
    """Create a custom DTO. Returns null while custom actions are disabled."""
    return service.create(request, requester)


@router.post("/module-dtos/enums", response_model=Optional[ModuleDto])
@handle_api_errors("Create enum")
def create_module_dto_enum(
    request: CreateModuleDtoRequest,
    service: ModuleDtoService = Depends(get_module_dto_service),
    requester: Requester = Depends(get_requester),
):
    return service.create_enum(request, requester)


@router.patch("/module-dtos/{dto_id}", response_model=ModuleDto)
@handle_api_errors("Update DTO")
def update_module_dto(
    dto_id: str,
    request: UpdateModuleDtoRequest,
    service: ModuleDtoService = Depends(get_module_dto_service),
    requester: Requester = Depends(get_requester),
):
    return service.update(dto_id, request, requester)


@router.delete("/module-dtos/{dto_id}", response_model=ModuleDto)
@handle_api_errors("Delete DTO")
def delete_module_dto(
    dto_id: str,
    service: ModuleDtoService = Depends(get_module_dto_service),
    requester: Requester = Depends(get_requester),
):
    return service.delete(dto_id, requester)


# Properties

@router.post("/module-dtos/{dto_id}/properties", response_model=ModuleDtoProperty)
@handle_api_errors("Create DTO property")
def create_dto_property(
    dto_id: str,
    request: NameRequest,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.add_property(CreateModuleDtoPropertyRequest(dto_id=dto_id, name=request.name))


@router.patch("/module-dtos/{dto_id}/properties/{property_name}", response_model=ModuleDtoProperty)
@handle_api_errors("Update DTO property")
def update_dto_property(
    dto_id: str,
    property_name: str,
    request: UpdateModuleDtoPropertyRequest,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.update_property(dto_id, property_name, request)


@router.delete("/module-dtos/{dto_id}/properties/{property_name}", response_model=ModuleDtoProperty)
@handle_api_errors("Delete DTO property")
def delete_dto_property(
    dto_id: str,
    property_name: str,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.delete_property(dto_id, property_name)


# Enum members

@router.post("/module-dtos/{dto_id}/members", response_model=ModuleDtoEnumMember)
@handle_api_errors("Create enum member")
def create_dto_enum_member(
    dto_id: str,
    request: NameRequest,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.add_enum_member(CreateModuleDtoEnumMemberRequest(dto_id=dto_id, name=request.name))


@router.patch("/module-dtos/{dto_id}/members/{member_name}", response_model=ModuleDtoEnumMember)
@handle_api_errors("Update enum member")
def update_dto_enum_member(
    dto_id: str,
    member_name: str,
    request: UpdateModuleDtoEnumMemberRequest,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.update_enum_member(dto_id, member_name, request)


@router.delete("/module-dtos/{dto_id}/members/{member_name}", response_model=ModuleDtoEnumMember)
@handle_api_errors("Delete enum member")
def delete_dto_enum_member(
    dto_id: str,
    member_name: str,
    editor: DtoPropertyEditor = Depends(get_dto_property_editor),
):
    return editor.delete_enum_member(dto_id, member_name)
