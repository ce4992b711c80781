"""
Error handling decorators and utilities for API endpoints.

Maps the DTO service exceptions to HTTP responses in one place so route
handlers can call the services directly.
"""

import inspect
from functools import wraps
from typing import Callable
from fastapi import HTTPException
import logging

from constants import HTTPStatus
from exceptions import (
    ApplicationError,
    ConflictError,
    EntitlementError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _translate(operation_name: str, error: Exception) -> HTTPException:
    """
    Convert an exception raised by a service into an HTTPException.

    Args:
        operation_name: Human-readable name of the operation
        error: The exception that escaped the handler

    Returns:
        HTTPException to raise in its place
    """
    if isinstance(error, ValidationError):
        logger.warning(f"{operation_name} - Validation error: {error.message}")
        return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=error.message)
    if isinstance(error, ConflictError):
        logger.warning(f"{operation_name} - Conflict: {error.message}")
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=error.message)
    if isinstance(error, NotFoundError):
        logger.warning(f"{operation_name} - Not found: {error.message}")
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=error.message)
    if isinstance(error, ForbiddenError):
        logger.warning(f"{operation_name} - Forbidden: {error.message}")
        return HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=error.message)
    if isinstance(error, EntitlementError):
        logger.warning(f"{operation_name} - Entitlement error: {error.message}")
        return HTTPException(status_code=HTTPStatus.PAYMENT_REQUIRED, detail=error.message)
    if isinstance(error, ApplicationError):
        logger.error(f"{operation_name} - Application error: {error.message}", exc_info=error)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"{operation_name} failed: {error.message}"
        )

    logger.error(f"{operation_name} - Unexpected error: {error}", exc_info=error)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        detail=f"{operation_name} failed. Please check server logs or contact support."
    )


def handle_api_errors(operation_name: str):
    """
    Decorator to handle DTO service errors consistently across endpoints.

    Args:
        operation_name: Human-readable name of the operation (e.g., "Create DTO")

    Returns:
        Decorated function that handles errors uniformly

    Example:
        @router.post("/module-dtos")
        @handle_api_errors("Create DTO")
        def create_module_dto(...):
            return service.create(request, requester)
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                # Re-raise HTTPException as-is to preserve status code and detail
                raise
            except Exception as e:
                raise _translate(operation_name, e) from e

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                raise _translate(operation_name, e) from e

        # Return appropriate wrapper based on whether the function is async
        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
