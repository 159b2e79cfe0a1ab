"""API exceptions and handlers.

Every error leaves the service as ``{"error": "<message>"}``; callers only get
the status code and a free-text message.
"""

import logging
import uuid
from typing import Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    Base exception for errors rendered as a single message field.

    Route handlers raise subclasses of this; ``api_error_handler`` turns them
    into JSON responses.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the API error.

        Args:
            status_code: HTTP status code
            message: Human-readable explanation returned to the caller
            headers: HTTP headers to include in response
        """
        self.message = message
        super().__init__(status_code=status_code, detail=message, headers=headers)


class ValidationError(ApiError):
    """Exception for malformed client input."""

    def __init__(self, message: str = "The request data failed validation"):
        super().__init__(status_code=400, message=message)


class MissingTokenError(ApiError):
    """Exception raised when a protected route gets no signed assertion."""

    def __init__(self, message: str = "No token provided"):
        super().__init__(status_code=403, message=message)


class TokenVerificationError(ApiError):
    """
    Exception raised when a signed assertion fails verification.

    Bad signatures and expired tokens both surface as 500, not 401.
    """

    def __init__(self, message: str = "Failed to authenticate token"):
        super().__init__(status_code=500, message=message)


class NotFoundError(ApiError):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str = "Resource", message: Optional[str] = None):
        super().__init__(status_code=404, message=message or f"{resource_type} not found")


class ServiceError(ApiError):
    """Exception for failures of the database, storage, mail or signer."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(status_code=500, message=message)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as ``{"error": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404 routes, multipart limits) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI request validation errors to 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log unhandled exceptions with a correlation id and return a plain 500.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: ``{"error": "Internal server error"}``
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "error": str(exc),
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app) -> None:
    """Register all exception handlers on the FastAPI app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
