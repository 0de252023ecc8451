"""Map service errors to HTTP responses (one status per ErrorKind)."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.auth import ErrorResponse
from app.services.errors import (
    AuthServiceError,
    ErrorKind,
    ValidationFailedError,
    VerificationPendingError,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_LOCKED: status.HTTP_423_LOCKED,
    ErrorKind.VERIFICATION_PENDING: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_OR_EXPIRED_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MISSING_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_OR_EXPIRED_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
}

_unmapped = set(ErrorKind) - set(STATUS_BY_KIND)
if _unmapped:
    raise RuntimeError(f"ErrorKind values without an HTTP status: {sorted(_unmapped)}")


def error_response(exc: AuthServiceError) -> JSONResponse:
    """Build the JSON error body and status for a service error."""
    status_code = STATUS_BY_KIND[exc.kind]
    body = ErrorResponse(
        error=exc.kind.value,
        detail=exc.message,
        user_id=exc.user_id if isinstance(exc, VerificationPendingError) else None,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def handle_auth_service_error(request: Request, exc: AuthServiceError) -> JSONResponse:
    logger.info(
        "Request rejected: path=%s kind=%s", request.url.path, exc.kind.value
    )
    return error_response(exc)


# Dropped from error locations; clients only need the field path.
_LOCATION_PREFIXES = frozenset({"body", "query", "path", "cookie", "header"})


def describe_validation_errors(errors: list[dict]) -> str:
    """Flatten pydantic errors into "field: message; field: message"."""
    parts = []
    for err in errors:
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in _LOCATION_PREFIXES)
        parts.append(f"{field}: {err['msg']}" if field else str(err["msg"]))
    return "; ".join(parts) or ValidationFailedError.default_message


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "Request rejected: path=%s kind=%s", request.url.path, ErrorKind.VALIDATION_ERROR.value
    )
    return error_response(ValidationFailedError(describe_validation_errors(exc.errors())))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, handle_auth_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
