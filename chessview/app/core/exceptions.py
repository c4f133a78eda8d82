"""
Domain errors raised by services and rendered by the handler registered in main.py.

Response shape:
    {"detail": "<stable message>", "code": "<error code>", "errors": [...]}
"errors" is only present for validation failures.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse

from chessview.app.core.logging_config import get_logger

logger = get_logger("core.exceptions")


class ChessViewError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ChessViewError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class UnauthorizedError(ChessViewError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Invalid credentials"


class ForbiddenError(ChessViewError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Not authorized to perform this action"


class ValidationError(ChessViewError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_message = "Invalid input data"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


class TerminalStateError(ChessViewError):
    status_code = status.HTTP_409_CONFLICT
    code = "terminal_state"
    default_message = "Interview is already completed or cancelled"


class ExternalServiceError(ChessViewError):
    """Completion service failure. The relay converts it into a fallback reply."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "external_service_error"
    default_message = "Completion service unavailable"


class StorageError(ChessViewError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "storage_error"
    default_message = "Storage failure"


async def chessview_error_handler(request: Request, exc: ChessViewError) -> JSONResponse:
    body = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error("%s %s failed code=%s detail=%s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)
