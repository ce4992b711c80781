"""
Custom exception classes for the DTO metadata services.

Every failure raised by the lifecycle manager, the synchronizer and the
property/member editor is an ApplicationError subclass, so the API host can
map them to responses in one place (see utils.error_handlers).
"""


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when there's a configuration issue"""

    def __init__(self, message: str, key: str | None = None):
        details = {"key": key} if key else {}
        super().__init__(message, details)


class ValidationError(ApplicationError):
    """Raised when validation fails"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class InvalidNameError(ValidationError):
    """Raised when a DTO or enum member name breaks the identifier syntax"""

    def __init__(self, name: str, kind: str = "moduleDto"):
        super().__init__(f"Invalid {kind} name", invalid_fields={"name": name})


class ConflictError(ApplicationError):
    """Raised when a name is already taken among siblings or in a resource"""

    def __init__(self, message: str, name: str | None = None, dto_id: str | None = None):
        details = {}
        if name is not None:
            details["name"] = name
        if dto_id is not None:
            details["dto_id"] = dto_id
        super().__init__(message, details)


class StaleVersionError(ConflictError):
    """Raised when a DTO changed between read and write"""

    def __init__(self, dto_id: str, expected_version: int, actual_version: int | None = None):
        super().__init__(
            f"Module DTO was modified concurrently, ID: {dto_id}",
            dto_id=dto_id,
        )
        self.details["expected_version"] = expected_version
        self.details["actual_version"] = actual_version


class NotFoundError(ApplicationError):
    """Raised when a DTO, property or member does not exist"""

    def __init__(self, message: str, dto_id: str | None = None):
        details = {"dto_id": dto_id} if dto_id else {}
        super().__init__(message, details)


class ForbiddenError(ApplicationError):
    """Raised when an operation is not permitted for the DTO's type"""

    def __init__(self, message: str, dto_type: str | None = None):
        details = {"dto_type": dto_type} if dto_type else {}
        super().__init__(message, details)


class EntitlementError(ApplicationError):
    """Raised when the requester's workspace lacks the custom actions feature"""

    def __init__(self, workspace_id: str | None, message: str | None = None):
        msg = message or "Custom actions are not available for this workspace"
        super().__init__(msg, {"workspace_id": workspace_id})
