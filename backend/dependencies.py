"""
Dependency injection providers for FastAPI.

This module provides factory functions for creating repository and service
instances, following the Dependency Inversion Principle. Hosts override the
collaborator providers (entitlement gate and analytics sink) with
their own implementations via app.dependency_overrides.
"""

from functools import lru_cache

from sqlalchemy.orm import Session
from fastapi import Depends, Header
from typing import Optional

from config.dto_config import DtoSettings, load_settings
from database import get_db
from dtos.internal.schema_descriptors import Requester
from repositories.module_dto_repository import ModuleDtoRepository
from services.analytics_tracker import AnalyticsTracker, LoggingAnalyticsSink
from services.dto_property_editor import DtoPropertyEditor
from services.entitlement_service import StaticEntitlementGate
from services.interfaces import IAnalyticsSink, IEntitlementGate
from services.module_dto_service import ModuleDtoService


@lru_cache()
def get_settings() -> DtoSettings:
    """
    Process-wide DTO settings, read from the environment once.

    Returns:
        DtoSettings instance
    """
    return load_settings()


def get_requester(
    x_user_id: str = Header(..., alias="X-User-Id"),
    x_workspace_id: Optional[str] = Header(None, alias="X-Workspace-Id"),
) -> Requester:
    """Identify the caller from the request headers."""
    return Requester(user_id=x_user_id, workspace_id=x_workspace_id)


def get_module_dto_repository(db: Session = Depends(get_db)) -> ModuleDtoRepository:
    """
    Factory function for creating ModuleDtoRepository instances.

    Args:
        db: Database session (injected)

    Returns:
        ModuleDtoRepository instance
    """
    return ModuleDtoRepository(db)


def get_entitlement_gate(settings: DtoSettings = Depends(get_settings)) -> IEntitlementGate:
    """
    Factory function for the custom actions billing gate.

    Note: The bundled gate is config driven; swap it for one backed by the
    billing system in production.
    """
    return StaticEntitlementGate.from_settings(settings)


def get_analytics_sink() -> IAnalyticsSink:
    return LoggingAnalyticsSink()


def get_analytics_tracker(
    sink: IAnalyticsSink = Depends(get_analytics_sink),
    entitlement_gate: IEntitlementGate = Depends(get_entitlement_gate),
) -> AnalyticsTracker:
    return AnalyticsTracker(sink, entitlement_gate)


def get_module_dto_service(
    db: Session = Depends(get_db),
    settings: DtoSettings = Depends(get_settings),
    entitlement_gate: IEntitlementGate = Depends(get_entitlement_gate),
    analytics: AnalyticsTracker = Depends(get_analytics_tracker),
    repository: ModuleDtoRepository = Depends(get_module_dto_repository),
) -> ModuleDtoService:
    """
    Factory function for creating ModuleDtoService instances.

    Returns:
        ModuleDtoService bound to the request's session
    """
    return ModuleDtoService(db, settings, entitlement_gate, analytics, repository)


def get_dto_property_editor(
    db: Session = Depends(get_db),
    settings: DtoSettings = Depends(get_settings),
    repository: ModuleDtoRepository = Depends(get_module_dto_repository),
) -> DtoPropertyEditor:
    """
    Factory function for creating DtoPropertyEditor instances.

    Returns:
        DtoPropertyEditor bound to the request's session
    """
    return DtoPropertyEditor(db, settings, repository)
