from abc import ABC, abstractmethod
from typing import List
from ..models.user import User


class UserRepository(ABC):
    """
    Repository interface - defines contract for user data access.

    Implementations report failures as StorageError (see .errors), never as
    driver-specific exceptions.
    """

    @abstractmethod
    async def get(self, user_id: str) -> User:
        """Find user by ID. Raises StorageError(NOT_FOUND) when absent"""
        pass

    @abstractmethod
    async def list_all(self, cursor: str, limit: int) -> List[User]:
        """Users ordered by id ascending, strictly after cursor when cursor is set"""
        pass

    @abstractmethod
    async def list_by_country(self, country: str, cursor: str, limit: int) -> List[User]:
        """Same as list_all, restricted to one country"""
        pass

    @abstractmethod
    async def insert(self, user: User) -> None:
        """Insert a new user. Raises StorageError(DUPLICATE_EMAIL) on email collision"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Replace all mutable fields of an existing user and return the stored row"""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Delete user by ID. Returns False when no row matched (not an error)"""
        pass

    @abstractmethod
    async def check_health(self) -> None:
        """Liveness probe against the underlying store"""
        pass
