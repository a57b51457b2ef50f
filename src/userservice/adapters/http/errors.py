"""Mapping of domain errors to HTTP responses."""

from typing import Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...domain.exceptions import (
    DuplicateEmailError,
    UserNotFoundError,
    UserServiceError,
    ValidationError,
)

INTERNAL_ERROR_MESSAGE = "internal server error"


def map_domain_error(error: UserServiceError) -> Tuple[int, str]:
    """
    Status code and client-facing message for a domain error.

    Store failures and anything unclassified become a 500 whose message
    does not leak internals.
    """
    if isinstance(error, UserNotFoundError):
        return status.HTTP_404_NOT_FOUND, str(error)
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST, str(error)
    if isinstance(error, DuplicateEmailError):
        return status.HTTP_409_CONFLICT, str(error)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def domain_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
    status_code, message = map_domain_error(exc)
    if status_code >= 500:
        request.app.state.container.logger.error(
            "Request failed",
            exc_info=exc,
            extra={"error_type": type(exc).__name__},
        )
    return error_response(status_code, message)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(details) or "invalid request")


def unhandled_error_response(logger, exc: Exception) -> JSONResponse:
    """
    Log an exception no handler claimed and answer with a generic 500.

    Called from the request middleware so the response still carries the
    request id and is counted in the request log.
    """
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"error_type": type(exc).__name__},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that turn exceptions into ``{"error": ...}`` bodies."""
    app.add_exception_handler(UserServiceError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
