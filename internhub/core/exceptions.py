"""
Domain errors raised by the service layer.

Routes never catch these; the handlers registered in internhub.main
turn them into JSON error responses with the matching status code.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class InternHubError(Exception):
    """Base error for the marketplace."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class NotFoundError(InternHubError):
    """Raised when the requested entity exists in neither store."""

    status_code = 404


class AuthenticationError(InternHubError):
    """Raised when credentials are missing or wrong."""

    status_code = 401


class PermissionDeniedError(InternHubError):
    """Raised when the caller's role does not allow the operation."""

    status_code = 403


class ConflictError(InternHubError):
    """Raised when the request conflicts with existing state (second company, status change)."""

    status_code = 409


class InvalidTransitionError(ConflictError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(f"Cannot change {entity} status from '{current}' to '{requested}'")
        self.entity = entity
        self.current = current
        self.requested = requested


class ValidationError(InternHubError):
    """Raised when a payload is rejected before it reaches a store."""

    status_code = 400


class StoreUnavailableError(InternHubError):
    """Raised when both the primary and the document store failed."""

    status_code = 500


async def handle_internhub_error(request: Request, exc: InternHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InternHubError, handle_internhub_error)
