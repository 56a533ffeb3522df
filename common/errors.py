"""Error taxonomy shared by the engines and the HTTP layer.

Every failure carries a machine-readable ``kind`` next to its human-readable
message, so clients can branch on the cause instead of the wording.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class HostelError(Exception):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthRequired(HostelError):
    kind = "auth_required"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class Forbidden(HostelError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(HostelError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class RoomNotFound(NotFound):
    kind = "room_not_found"
    default_message = "Room not found"


class StudentNotFound(NotFound):
    kind = "student_not_found"
    default_message = "Student not found"


class RequestNotFound(NotFound):
    kind = "request_not_found"
    default_message = "Request not found"


class Conflict(HostelError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class BedUnavailable(HostelError):
    """The requested (room, bed number) cannot be taken."""

    kind = "bed_unavailable"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Bed not available"


class BedNotFound(BedUnavailable, NotFound):
    kind = "bed_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Bed does not exist"


class BedOccupied(BedUnavailable, Conflict):
    kind = "bed_occupied"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Bed is already occupied"


class AlreadyProcessed(Conflict):
    kind = "already_processed"
    default_message = "Request has already been processed"


class DuplicateUser(Conflict):
    kind = "duplicate_user"
    default_message = "Username already exists"


class ValidationFailed(HostelError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


def error_body(message: str, kind: str) -> dict[str, str]:
    return {"error": message, "kind": kind}


def hostel_error_handler(request: Request, exc: HostelError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.kind))


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(message, ValidationFailed.kind),
    )


def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", HostelError.kind),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": ..., "kind": ...}``."""

    app.add_exception_handler(HostelError, hostel_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
