"""
Application-wide constants.

This module centralizes the magic strings and numbers used by the DTO
metadata services so that naming rules, event names and status codes
live in one place.
"""
from enum import Enum


class BlockType(str, Enum):
    """Kinds of blocks stored in the versioned block store."""

    MODULE_DTO = 'ModuleDto'


class EventType(str, Enum):
    """Analytics event names emitted by the DTO services."""

    SEARCH_APIS = 'SearchAPIs'
    CREATE_USER_DTO = 'CreateUserDTO'
    INTERACT_USER_DTO = 'InteractUserDTO'


class NameRules:
    """Identifier syntax shared by DTO names and enum member names"""

    PATTERN = r'^[a-zA-Z0-9._-]{1,249}$'
    MAX_LENGTH = 249


class EnvKeys:
    """Environment variables read by the configuration layer"""

    CUSTOM_ACTIONS_ENABLED = 'FEATURE_CUSTOM_ACTIONS_ENABLED'
    MAX_EDIT_ATTEMPTS = 'DTO_MAX_EDIT_ATTEMPTS'
    ENTITLED_WORKSPACES = 'CUSTOM_ACTIONS_ENTITLED_WORKSPACES'
    DEFAULT_PLAN = 'DEFAULT_SUBSCRIPTION_PLAN'
    DATABASE_URL = 'DTO_DATABASE_URL'
    LOG_DIR = 'DTO_LOG_DIR'
    HOST = 'DTO_HOST'
    PORT = 'DTO_PORT'


class Defaults:
    """Fallback values used when configuration is absent"""

    MAX_EDIT_ATTEMPTS = 3
    SUBSCRIPTION_PLAN = 'Free'
    DATABASE_URL = 'sqlite:///./module_dtos.db'
    LOG_DIR = './logs'
    HOST = '127.0.0.1'
    PORT = 8000


class HTTPStatus:
    """HTTP status codes used when mapping errors for the API host"""

    # Client Errors
    BAD_REQUEST = 400
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409

    # Server Errors
    INTERNAL_SERVER_ERROR = 500
