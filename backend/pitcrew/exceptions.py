"""
Structured exceptions and error responses for Pitcrew.

Provides consistent error handling across the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pitcrew.logging_config import get_logger

logger = get_logger("pitcrew.error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "store_unavailable")
    message: str
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class PitcrewException(Exception):
    """Base exception for all Pitcrew errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(PitcrewException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class SessionNotFoundError(NotFoundError):
    """Timeline session is unknown or already closed."""

    def __init__(self, session_id: str):
        super().__init__("Timeline session", session_id)
        self.error_code = "session_not_found"


class ValidationError(PitcrewException):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class StoreError(PitcrewException):
    """The document store could not be reached or rejected the call."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="store_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.collection = collection


# =============================================================================
# Exception Handlers
# =============================================================================

async def pitcrew_exception_handler(request: Request, exc: PitcrewException) -> JSONResponse:
    """Handle PitcrewException and return structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": None,
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PitcrewException, pitcrew_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
