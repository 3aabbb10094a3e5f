import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from threadboard.errors import (
    AccessDeniedError,
    AuthenticationError,
    DataIntegrityError,
    NotFoundError,
    StoreUnavailableError,
    UnknownParentError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# Checked in order, first match wins
USER_ERROR_STATUS: list[tuple[type[Exception], int, str]] = [
    (AuthenticationError, 401, "authentication_error"),
    (AccessDeniedError, 403, "access_denied"),
    (NotFoundError, 404, "not_found"),
    (UnknownParentError, 409, "unknown_parent"),
    (ValidationError, 400, "validation_error"),
    (StoreUnavailableError, 503, "store_unavailable"),
    (DataIntegrityError, 500, "data_integrity_error"),
]


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    status_code, error_type = 400, "bad_request"
    for error_class, code, type_name in USER_ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code, error_type = code, type_name
            break

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", exc_info=exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
