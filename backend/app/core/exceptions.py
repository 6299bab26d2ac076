"""
Domain exceptions and their HTTP rendering.

Every error the API deliberately returns is a BookingAPIError subclass.
A single handler renders them as {"error": message} with the class's status
code, so policy rejections reach the user verbatim.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class BookingAPIError(Exception):
    """Base class for errors rendered as {"error": message}."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingAPIError):
    """Malformed input: missing fields, unparsable dates, reversed ranges."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class PolicyRejection(BookingAPIError):
    """A booking rule said no. The reason is user-facing."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Booking not allowed"


class Unauthorized(BookingAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class NotFound(BookingAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(BookingAPIError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Request conflicts with the current state"


class ConsistencyFault(BookingAPIError):
    """
    The venue calendar and the booking store disagree.

    Raised by the orchestration layer only; the transaction is rolled back
    and the fault is logged as critical.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Venue calendar is out of sync with bookings"


async def booking_api_error_handler(request: Request, exc: BookingAPIError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = ValidationError.default_message
    logger.info("request_validation_failed", error=message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingAPIError, booking_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
