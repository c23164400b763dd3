import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

COUNTRY_CODE_LENGTH = 2
DEFAULT_PAGE_SIZE = 100


def normalize_country_code(country: str) -> str:
    """Trim and upper-case a country code"""
    return country.strip().upper()


def is_valid_country_code(country: str) -> bool:
    """A normalized country code is exactly two letters"""
    return len(country) == COUNTRY_CODE_LENGTH and country.isalpha()


@dataclass
class User:
    """Pure domain model for User entity - no external dependencies"""
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    email: str = ""
    password: str = ""
    country: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class FilterParams:
    """Listing filters; country is None when no filter is requested"""
    country: Optional[str] = None

    def normalized(self) -> "FilterParams":
        if self.country is None:
            return self
        return replace(self, country=normalize_country_code(self.country))


@dataclass(frozen=True)
class PaginationParams:
    """
    Keyset pagination: cursor is the last id seen (empty for the first page),
    limit is the maximum number of users to return.
    """
    cursor: str = ""
    limit: int = DEFAULT_PAGE_SIZE


def is_valid_user_id(user_id: str) -> bool:
    """User ids are UUID strings"""
    try:
        uuid.UUID(user_id)
    except (ValueError, TypeError, AttributeError):
        return False
    return True
