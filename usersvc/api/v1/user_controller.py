# Standard library imports
import asyncio
import logging
from typing import Awaitable, List, TypeVar

# External package imports
from fastapi import APIRouter, HTTPException, status

# Local application imports
from ...application.dto.user_dto import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    GetUserRequest,
    GetUserResponse,
    ListUsersRequest,
    ListUsersResponse,
    UpdateUserRequest,
    UpdateUserResponse,
    UserMessage,
)
from ...application.services.user_service import UserService
from ...core.config import get_settings
from ...domain.errors import ServiceError
from ...domain.models.user import User
from ...di.container import get_container
from .errors import internal_error, invalid_argument, service_error_to_http
from .validation import (
    InvalidArgumentError,
    validate_create_request,
    validate_id,
    validate_list_request,
    validate_update_request,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

router = APIRouter(tags=["users"])


def to_user_message(user: User) -> UserMessage:
    """Domain user -> wire user (the password never leaves the service)"""
    return UserMessage(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        nickname=user.nickname,
        email=user.email,
        country=user.country,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def next_page_token(users: List[User], page_size: int) -> str:
    """The last id is a cursor only when the page came back full"""
    if users and len(users) == page_size:
        return users[-1].id
    return ""


def _rejected(error: InvalidArgumentError) -> HTTPException:
    logger.error(f"Failed to validate request: {error.message}")
    return invalid_argument(error)


async def _call_service(call: Awaitable[T], operation: str) -> T:
    """
    Await a service call bounded by the request timeout

    Args:
        call: Service coroutine
        operation: Short description used in logs

    Returns:
        Whatever the service returned

    Raises:
        HTTPException: Mapped from ServiceError, or 500 on timeout
    """
    try:
        return await asyncio.wait_for(call, timeout=get_settings().request_timeout_seconds)
    except ServiceError as e:
        logger.error(f"Failed to {operation}: {e!r}")
        raise service_error_to_http(e) from e
    except asyncio.TimeoutError as e:
        logger.error(f"Failed to {operation}: request timed out")
        raise internal_error() from e


@router.post("/create", response_model=CreateUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(request: CreateUserRequest) -> CreateUserResponse:
    """
    Create a new user

    Args:
        request: User creation request

    Returns:
        CreateUserResponse with the created user (no password)
    """
    try:
        user = validate_create_request(request)
    except InvalidArgumentError as e:
        raise _rejected(e) from e

    user_service = get_container().get(UserService)
    created = await _call_service(user_service.create(user), "create user")
    return CreateUserResponse(user=to_user_message(created))


# Without an id segment the request is answered with "id is required"
@router.get("/get", response_model=GetUserResponse)
@router.get("/get/{user_id}", response_model=GetUserResponse)
async def get_user(user_id: str = "") -> GetUserResponse:
    """
    Get a user by ID

    Args:
        user_id: ID of the user (empty when the path omits it)

    Returns:
        GetUserResponse with user information
    """
    request = GetUserRequest(id=user_id)
    try:
        validate_id(request.id)
    except InvalidArgumentError as e:
        raise _rejected(e) from e

    user_service = get_container().get(UserService)
    user = await _call_service(user_service.fetch(request.id), "fetch user")
    return GetUserResponse(user=to_user_message(user))


@router.put("/update", response_model=UpdateUserResponse)
async def update_user(request: UpdateUserRequest) -> UpdateUserResponse:
    """
    Replace all fields of an existing user

    Args:
        request: Full user including id and new password

    Returns:
        UpdateUserResponse with the stored user
    """
    try:
        user = validate_update_request(request)
    except InvalidArgumentError as e:
        raise _rejected(e) from e

    user_service = get_container().get(UserService)
    updated = await _call_service(user_service.update(user), "update user")
    return UpdateUserResponse(user=to_user_message(updated))


@router.delete("/delete", response_model=DeleteUserResponse)
@router.delete("/delete/{user_id}", response_model=DeleteUserResponse)
async def delete_user(user_id: str = "") -> DeleteUserResponse:
    """Delete a user; deleting an unknown id succeeds"""
    request = DeleteUserRequest(id=user_id)
    try:
        validate_id(request.id)
    except InvalidArgumentError as e:
        raise _rejected(e) from e

    user_service = get_container().get(UserService)
    await _call_service(user_service.delete(request.id), "delete user")
    return DeleteUserResponse()


@router.get("/list", response_model=ListUsersResponse)
async def list_users(country: str = "", page_size: int = 0, page_token: str = "") -> ListUsersResponse:
    """
    List users page by page

    Args:
        country: Optional two letter country filter
        page_size: Users per page (1-100, anything else means 100)
        page_token: next_page_token from the previous page

    Returns:
        ListUsersResponse with users and the cursor for the next page
    """
    request = ListUsersRequest(country=country, page_size=page_size, page_token=page_token)
    try:
        filter_params, pagination = validate_list_request(request)
    except InvalidArgumentError as e:
        raise _rejected(e) from e

    user_service = get_container().get(UserService)
    users = await _call_service(user_service.fetch_all(filter_params, pagination), "fetch users")
    return ListUsersResponse(
        users=[to_user_message(user) for user in users],
        next_page_token=next_page_token(users, pagination.limit),
    )
