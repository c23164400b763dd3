from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class UserMessage(BaseModel):
    """Wire representation of a user (no password)"""
    id: str
    first_name: str
    last_name: str
    nickname: str
    email: str
    country: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Request fields default to empty values so that missing fields reach the
# validator and produce its *required errors instead of a schema rejection.

class CreateUserRequest(BaseModel):
    """DTO for user creation request"""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    email: str = ""
    password: str = ""
    country: str = ""


class CreateUserResponse(BaseModel):
    user: UserMessage


class GetUserRequest(BaseModel):
    id: str = ""


class GetUserResponse(BaseModel):
    user: UserMessage


class UpdateUserRequest(BaseModel):
    """DTO for full user replacement; every field is required"""
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    email: str = ""
    password: str = ""
    country: str = ""


class UpdateUserResponse(BaseModel):
    user: UserMessage


class DeleteUserRequest(BaseModel):
    id: str = ""


class DeleteUserResponse(BaseModel):
    pass


class ListUsersRequest(BaseModel):
    """DTO for listing users; page_size outside 1..100 is clamped to 100"""
    country: str = ""
    page_size: int = 0
    page_token: str = ""


class ListUsersResponse(BaseModel):
    users: List[UserMessage] = Field(default_factory=list)
    next_page_token: str = ""


class ServingStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    SERVING = "SERVING"
    NOT_SERVING = "NOT_SERVING"


class HealthCheckRequest(BaseModel):
    service: str = ""


class HealthCheckResponse(BaseModel):
    status: ServingStatus
