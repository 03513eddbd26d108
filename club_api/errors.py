"""
Application error taxonomy.

Every error carries an HTTP status and a stable machine-readable code, and is
rendered as {"error": ..., "details": ..., "code": ...} by the exception
handler registered in club_api.main.
"""
from fastapi import status
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details, "code": self.code}


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"


class PayloadTooLarge(AppError):
    status_code = 413
    code = "FILE_TOO_LARGE"
    default_message = "File size exceeds maximum allowed size"


class InvalidFileType(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_FILE_TYPE"
    default_message = "Invalid file type. Only images are allowed"


class MultipartError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MULTIPART_ERROR"
    default_message = "Malformed multipart request"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class Unauthorized(AppError):
    # Reserved: no resource is protected yet
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class PersistenceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "DATABASE_ERROR"
    default_message = "Database error"


def translate_db_error(exc: SQLAlchemyError, resource: str = "Resource") -> AppError:
    """
    Map a SQLAlchemy failure onto the error taxonomy.

    "No row" becomes NotFound. Everything else is logged with full detail and
    surfaced only as a generic PersistenceError, so query text never reaches
    the client.
    """
    if isinstance(exc, NoResultFound):
        return NotFound(f"{resource} not found")

    logger.error(f"Database error ({type(exc).__name__}): {str(exc)}", exc_info=exc)
    return PersistenceError()
