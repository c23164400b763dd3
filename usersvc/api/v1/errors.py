# Standard library imports
import logging
from typing import Dict

# External package imports
from fastapi import HTTPException, status

# Local application imports
from ...domain.errors import ErrorKind, ServiceError
from .validation import InvalidArgumentError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal error"

# Domain error kind -> HTTP status
ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def invalid_argument(error: InvalidArgumentError) -> HTTPException:
    """Validation failures are always 400 and carry the field message"""
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


def service_error_to_http(error: ServiceError) -> HTTPException:
    """
    Translate a domain error into an HTTP error

    Args:
        error: Error raised by the user service

    Returns:
        HTTPException with the mapped status; internal details are never exposed
    """
    status_code = ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        return HTTPException(status_code=status_code, detail=INTERNAL_ERROR_MESSAGE)
    return HTTPException(status_code=status_code, detail=error.message)


def internal_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_MESSAGE)
