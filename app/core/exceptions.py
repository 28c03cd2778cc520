"""Application exception classes and handlers."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.response_schema import error_response


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_event(self) -> dict[str, str]:
        """Payload for an ``error`` event sent over the chat socket."""
        return {"code": self.code, "message": self.message}


# --- Chat protocol (400) ---


class InvalidFrameError(AppException):
    """Inbound socket frame is not a valid event envelope."""

    def __init__(self) -> None:
        super().__init__(
            message="Malformed event frame",
            code="INVALID_FRAME",
            status_code=400,
        )


class JoinFailedError(AppException):
    """Join could not be completed."""

    def __init__(self) -> None:
        super().__init__(
            message="Failed to join the chat",
            code="JOIN_FAILED",
            status_code=400,
        )


class InvalidMessageError(AppException):
    """Message payload carries neither ``content`` nor ``text``."""

    def __init__(self) -> None:
        super().__init__(
            message="Message content is required",
            code="INVALID_MESSAGE",
            status_code=400,
        )


class EmptyMessageError(AppException):
    """Text message is blank after trimming."""

    def __init__(self) -> None:
        super().__init__(
            message="Message content cannot be empty",
            code="EMPTY_MESSAGE",
            status_code=400,
        )


class MessageRejectedError(AppException):
    """Store refused or failed to persist the message."""

    def __init__(self) -> None:
        super().__init__(
            message="Failed to send message",
            code="SEND_FAILED",
            status_code=400,
        )


class EventFailedError(AppException):
    """Unexpected failure while handling a socket event."""

    def __init__(self) -> None:
        super().__init__(
            message="Failed to process event",
            code="EVENT_FAILED",
            status_code=400,
        )


# --- Upload (400 / 413) ---


class EmptyUploadError(AppException):
    """No file, or an empty file, was uploaded."""

    def __init__(self) -> None:
        super().__init__(
            message="No file was uploaded",
            code="EMPTY_UPLOAD",
            status_code=400,
        )


class FileTooLargeError(AppException):
    """Uploaded file exceeds the configured size limit."""

    def __init__(self, max_size_mb: int) -> None:
        super().__init__(
            message=f"File exceeds the {max_size_mb} MB limit",
            code="FILE_TOO_LARGE",
            status_code=413,
        )


# --- Storage (500) ---


class StorageError(AppException):
    """A collection could not be read from or written to disk."""

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message=message, code="STORAGE_ERROR", status_code=500)


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.status_code, exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures in the AppException envelope."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    detail = first.get("msg", "Invalid request")
    message = f"{location}: {detail}" if location else detail
    return JSONResponse(
        status_code=422,
        content=error_response(422, message, "VALIDATION_ERROR"),
    )
