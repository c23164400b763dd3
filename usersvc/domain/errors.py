"""
Domain error vocabulary for the user service.

Every failure the service reports carries an ErrorKind. The transport layer
maps kinds to status codes; it never inspects messages. Context such as the
offending field or the user id travels on the error object.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Categories of domain failures."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base exception for all user service errors."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        field: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field
        self.user_id = user_id

    # -------------------------------------------------------------------------
    # Constructors for the errors the service raises
    # -------------------------------------------------------------------------

    @classmethod
    def invalid_id(cls, user_id: str) -> "ServiceError":
        return cls(ErrorKind.INVALID_INPUT, f"invalid id '{user_id}'", field="id", user_id=user_id)

    @classmethod
    def invalid_country(cls, country: str) -> "ServiceError":
        return cls(ErrorKind.INVALID_INPUT, f"invalid country code '{country}'", field="country")

    @classmethod
    def user_not_found(cls, user_id: str) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, f"user '{user_id}' not found", user_id=user_id)

    @classmethod
    def user_already_exists(cls, user_id: Optional[str] = None) -> "ServiceError":
        return cls(ErrorKind.ALREADY_EXISTS, "user already exists with given email", field="email", user_id=user_id)

    @classmethod
    def internal(cls, message: str, user_id: Optional[str] = None) -> "ServiceError":
        return cls(ErrorKind.INTERNAL, message, user_id=user_id)

    def __repr__(self) -> str:
        return f"ServiceError(kind={self.kind.value!r}, message={self.message!r}, field={self.field!r})"
