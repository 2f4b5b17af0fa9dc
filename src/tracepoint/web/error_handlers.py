import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from tracepoint.core.modules.session.models import AUTH_COOKIE_NAME
from tracepoint.errors import ErrorKind, InvalidTokenError, UserError

logger = structlog.get_logger(__name__)

SERVER_ERROR_MESSAGE = "A server error occurred. Please try again later."


def create_json_error_response(status_code: int, message: str, kind: ErrorKind) -> JSONResponse:
    """Create JSON error response with a machine-readable kind."""
    return JSONResponse(status_code=status_code, content={"error": kind.value, "message": message})


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses using the status and kind they declare."""
    if not isinstance(exc, UserError):
        return await general_exception_handler(_, exc)

    response = create_json_error_response(status_code=exc.status_code, message=str(exc), kind=exc.kind)
    if isinstance(exc, InvalidTokenError):
        response.delete_cookie(AUTH_COOKIE_NAME)
    return response


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Render request body/parameter validation failures as 400."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) for error in errors if error.get("loc")})
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    return create_json_error_response(status_code=400, message=message, kind=ErrorKind.VALIDATION)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle store failures and unexpected errors (500) without leaking details."""
    logger.exception("unexpected_error", error_type=type(exc).__name__, exc_info=exc)
    return create_json_error_response(status_code=500, message=SERVER_ERROR_MESSAGE, kind=ErrorKind.SERVER_ERROR)
