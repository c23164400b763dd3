"""
Request validation for the users API.

Every check runs before the service is called. The first failing rule
raises InvalidArgumentError; nothing is collected or partially applied.
"""

# Standard library imports
from enum import Enum
from typing import Tuple

# External package imports
from email_validator import EmailNotValidError, validate_email

# Local application imports
from ...application.dto.user_dto import CreateUserRequest, ListUsersRequest, UpdateUserRequest
from ...domain.constants import UserFields
from ...domain.models.user import (
    COUNTRY_CODE_LENGTH,
    DEFAULT_PAGE_SIZE,
    FilterParams,
    PaginationParams,
    User,
    is_valid_user_id,
)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MAX_PAGE_SIZE = DEFAULT_PAGE_SIZE


class ValidationCode(str, Enum):
    NAME_REQUIRED = "name_required"
    NAME_FORMAT = "name_format"
    NAME_LENGTH = "name_length"
    EMAIL_REQUIRED = "email_required"
    EMAIL_FORMAT = "email_format"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_LENGTH = "password_length"
    PASSWORD_FORMAT = "password_format"
    COUNTRY_CODE_REQUIRED = "country_code_required"
    COUNTRY_CODE_INVALID = "country_code_invalid"
    ID_REQUIRED = "id_required"
    ID_FORMAT = "id_format"
    PAGE_TOKEN_INVALID = "page_token_invalid"


_MESSAGES = {
    ValidationCode.NAME_REQUIRED: "{field} is required",
    ValidationCode.NAME_FORMAT: "{field} must only contain letters and spaces",
    ValidationCode.NAME_LENGTH: f"{{field}} must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters",
    ValidationCode.EMAIL_REQUIRED: "{field} is required",
    ValidationCode.EMAIL_FORMAT: "{field} is invalid",
    ValidationCode.PASSWORD_REQUIRED: "{field} is required",
    ValidationCode.PASSWORD_LENGTH: (
        f"{{field}} must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} characters"
    ),
    ValidationCode.PASSWORD_FORMAT: "{field} must contain at least one letter, one number and one special character",
    ValidationCode.COUNTRY_CODE_REQUIRED: "{field} is required",
    ValidationCode.COUNTRY_CODE_INVALID: "invalid {field}",
    ValidationCode.ID_REQUIRED: "{field} is required",
    ValidationCode.ID_FORMAT: "{field} is invalid",
    ValidationCode.PAGE_TOKEN_INVALID: "invalid page token",
}


class InvalidArgumentError(ValueError):
    """A request field failed validation"""

    def __init__(self, code: ValidationCode, field: str):
        self.code = code
        self.field = field
        self.message = _MESSAGES[code].format(field=field)
        super().__init__(self.message)


def validate_name(value: str, field: str) -> None:
    if not value:
        raise InvalidArgumentError(ValidationCode.NAME_REQUIRED, field)

    for char in value:
        if not char.isalpha() and not char.isspace():
            raise InvalidArgumentError(ValidationCode.NAME_FORMAT, field)

    if len(value) < MIN_NAME_LENGTH or len(value) > MAX_NAME_LENGTH:
        raise InvalidArgumentError(ValidationCode.NAME_LENGTH, field)


def validate_email_address(value: str) -> None:
    if not value:
        raise InvalidArgumentError(ValidationCode.EMAIL_REQUIRED, UserFields.EMAIL)

    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidArgumentError(ValidationCode.EMAIL_FORMAT, UserFields.EMAIL) from e


def validate_password(value: str) -> None:
    """
    Passwords need 8-128 characters with at least one letter, one number
    and one character that is neither.
    """
    if not value:
        raise InvalidArgumentError(ValidationCode.PASSWORD_REQUIRED, UserFields.PASSWORD)

    if len(value) < MIN_PASSWORD_LENGTH or len(value) > MAX_PASSWORD_LENGTH:
        raise InvalidArgumentError(ValidationCode.PASSWORD_LENGTH, UserFields.PASSWORD)

    has_letter = any(char.isalpha() for char in value)
    has_number = any(char.isnumeric() for char in value)
    has_special = any(not char.isalpha() and not char.isnumeric() for char in value)
    if not (has_letter and has_number and has_special):
        raise InvalidArgumentError(ValidationCode.PASSWORD_FORMAT, UserFields.PASSWORD)


def validate_country_code(value: str) -> None:
    if not value:
        raise InvalidArgumentError(ValidationCode.COUNTRY_CODE_REQUIRED, UserFields.COUNTRY)

    if len(value) != COUNTRY_CODE_LENGTH:
        raise InvalidArgumentError(ValidationCode.COUNTRY_CODE_INVALID, UserFields.COUNTRY)


def validate_id(value: str) -> None:
    if not value:
        raise InvalidArgumentError(ValidationCode.ID_REQUIRED, UserFields.ID)

    if not is_valid_user_id(value):
        raise InvalidArgumentError(ValidationCode.ID_FORMAT, UserFields.ID)


def _validate_user_fields(request: CreateUserRequest | UpdateUserRequest) -> None:
    validate_name(request.first_name, UserFields.FIRST_NAME)
    validate_name(request.last_name, UserFields.LAST_NAME)
    validate_name(request.nickname, UserFields.NICKNAME)
    validate_email_address(request.email)
    validate_password(request.password)
    validate_country_code(request.country)


def validate_create_request(request: CreateUserRequest) -> User:
    """
    Validate a create request and build the domain user

    Args:
        request: Create request as received

    Returns:
        User without id or timestamps (assigned by the service)

    Raises:
        InvalidArgumentError: On the first field that fails validation
    """
    _validate_user_fields(request)
    return User(
        first_name=request.first_name,
        last_name=request.last_name,
        nickname=request.nickname,
        email=request.email,
        password=request.password,
        country=request.country,
    )


def validate_update_request(request: UpdateUserRequest) -> User:
    """Same as validate_create_request, with the id checked first"""
    validate_id(request.id)
    _validate_user_fields(request)
    return User(
        id=request.id,
        first_name=request.first_name,
        last_name=request.last_name,
        nickname=request.nickname,
        email=request.email,
        password=request.password,
        country=request.country,
    )


def clamp_page_size(page_size: int) -> int:
    """Out of range page sizes fall back to the maximum"""
    if page_size <= 0 or page_size > MAX_PAGE_SIZE:
        return MAX_PAGE_SIZE
    return page_size


def validate_list_request(request: ListUsersRequest) -> Tuple[FilterParams, PaginationParams]:
    """
    Validate a list request and build filter and pagination parameters

    Args:
        request: List request as received

    Returns:
        (FilterParams, PaginationParams) with the page size clamped

    Raises:
        InvalidArgumentError: For a malformed page token or country
    """
    if request.page_token and not is_valid_user_id(request.page_token):
        raise InvalidArgumentError(ValidationCode.PAGE_TOKEN_INVALID, UserFields.PAGE_TOKEN)

    country = request.country or None
    if country is not None and len(country) != COUNTRY_CODE_LENGTH:
        raise InvalidArgumentError(ValidationCode.COUNTRY_CODE_INVALID, UserFields.COUNTRY)

    pagination = PaginationParams(cursor=request.page_token, limit=clamp_page_size(request.page_size))
    return FilterParams(country=country), pagination
