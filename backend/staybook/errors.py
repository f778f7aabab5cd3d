"""Typed booking failures and the FastAPI handlers that render them.

Every recoverable condition raised by the services is a ``BookingError``
subclass carrying the HTTP status it maps to. Handlers registered by
``setup_exception_handlers`` turn them, request validation errors, and
``HTTPException`` into the ``{"success": false, "error": ...}`` envelope.
Anything else is logged and reported as an opaque internal error.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for failures the API reports to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(BookingError):
    """The referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Forbidden(BookingError):
    """The caller is neither the owner nor an administrator."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class InvalidRange(BookingError):
    """Dates fall outside the property window, or end is not after start."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid date range"


class Conflict(BookingError):
    """The range overlaps an existing confirmed booking."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Selected dates overlap with existing bookings"


class AlreadyCancelled(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Booking is already cancelled"


class InvalidState(BookingError):
    """The operation is not allowed for the booking's current status or dates."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class ValidationFailed(BookingError):
    status_code = 422
    default_message = "Validation failed"


def error_body(message: str, details: list | None = None) -> dict:
    body: dict = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the failure-envelope handlers on ``app``."""

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg"),
            }
            for err in exc.errors()
        ]
        message = details[0]["message"] if details else ValidationFailed.default_message
        return JSONResponse(
            status_code=ValidationFailed.status_code,
            content=jsonable_encoder(error_body(message, details)),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error"),
        )
