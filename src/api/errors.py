"""
API error handling - Maps domain exceptions to HTTP responses.

Domain and validation errors are returned verbatim with their kind.
Infrastructure errors are logged in full and reported generically,
so storage backend details never reach the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    AuthError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    InfrastructureError,
    NotFoundError,
    OtpMismatchError,
    RegistrationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[RegistrationError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_400_BAD_REQUEST,
    ExpiredError: status.HTTP_400_BAD_REQUEST,
    OtpMismatchError: status.HTTP_400_BAD_REQUEST,
    AuthError: status.HTTP_401_UNAUTHORIZED,
    DeliveryError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    InfrastructureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

GENERIC_INFRASTRUCTURE_MESSAGE = "Internal storage error. Please try again."


def error_body(detail: str, kind: str, field: str | None = None) -> dict:
    # "error" mirrors detail for clients that read the message from that key
    body = {"detail": detail, "error": detail, "kind": kind}
    if field is not None:
        body["field"] = field
    return body


async def handle_registration_error(request: Request, exc: RegistrationError) -> JSONResponse:
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, InfrastructureError):
        logger.error(
            "Infrastructure failure on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=status_code,
            content=error_body(GENERIC_INFRASTRUCTURE_MESSAGE, exc.kind),
        )

    field = exc.field if isinstance(exc, ValidationError) else None
    return JSONResponse(status_code=status_code, content=error_body(str(exc), exc.kind, field))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    field = None
    if errors and errors[0].get("loc"):
        field = str(errors[0]["loc"][-1])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request body", ValidationError.kind, field),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain and request-validation error handlers on an app."""
    app.add_exception_handler(RegistrationError, handle_registration_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
