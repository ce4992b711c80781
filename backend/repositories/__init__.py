"""
Repository layer for data access abstraction.

This package contains the block repositories and the specifications used to
select module DTOs by settings and container.
"""

from .base_repository import BaseRepository
from .module_dto_repository import ModuleDtoRepository

__all__ = [
    "BaseRepository",
    "ModuleDtoRepository",
]
