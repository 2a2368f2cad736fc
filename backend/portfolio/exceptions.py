"""
Structured exceptions and error responses for the portfolio service.

Every failure a caller can see is one of a small closed set:
- NotFoundError: lookup or update of an unknown id
- ValidationError: bad input, including rejected dependencies
- BackendError / BackendUnavailableError: the backing store failed
- AuthenticationError: no valid session
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


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
    error: str  # Error code (e.g., "not_found", "self_dependency")
    message: str
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class PortfolioException(Exception):
    """Base exception for all portfolio errors."""

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


class NotFoundError(PortfolioException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(PortfolioException):
    """Request validation error."""

    def __init__(
        self,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        error_code: str = "validation_error",
        status_code: int = 422,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            details=details,
        )


class MissingDependencyEndpointError(ValidationError):
    """One side of a dependency was not selected."""

    def __init__(self, missing: List[str]):
        super().__init__(
            message="Select both an activity and the activity it depends on.",
            error_code="missing_dependency_endpoint",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[
                {"loc": ["body", field], "msg": "field required", "type": "missing"}
                for field in missing
            ],
        )
        self.missing = missing


class SelfDependencyError(ValidationError):
    """Activity cannot depend on itself."""

    def __init__(self, activity_id: str):
        super().__init__(
            message="An activity cannot depend on itself.",
            error_code="self_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
        self.activity_id = activity_id


class BackendError(PortfolioException):
    """The backing store rejected or failed an operation."""

    def __init__(
        self,
        context: str,
        message: str,
        error_code: str = "backend_error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
    ):
        super().__init__(
            message=f"{context}: {message}",
            error_code=error_code,
            status_code=status_code,
        )
        self.context = context
        self.cause_message = message


class BackendUnavailableError(BackendError):
    """The backing store could not be reached at all."""

    def __init__(self, context: str, message: str):
        super().__init__(
            context,
            message,
            error_code="backend_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


class AuthenticationError(PortfolioException):
    """Missing, expired or rejected session."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="not_authenticated",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def portfolio_exception_handler(request: Request, exc: PortfolioException) -> JSONResponse:
    """Handle PortfolioException and return structured response."""
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error_code,
            message=exc.message,
            details=exc.details,
        ).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PortfolioException, portfolio_exception_handler)
