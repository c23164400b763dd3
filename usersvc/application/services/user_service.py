"""
User Service
============

Business rules for user accounts: id generation, timestamps, password
hashing, country normalization, storage error translation and best-effort
change events.
"""

# Standard library imports
import asyncio
import functools
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, List, Optional, Set, TypeVar

# Local application imports
from ...core.security import hash_password
from ...domain.errors import ErrorKind, ServiceError
from ...domain.events import EventPublisher, UserEvent
from ...domain.models.user import (
    FilterParams,
    PaginationParams,
    User,
    is_valid_country_code,
    is_valid_user_id,
    normalize_country_code,
)
from ...domain.repositories.errors import StorageError, StorageErrorKind
from ...domain.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Storage failure -> domain failure
STORAGE_ERROR_KINDS: Dict[StorageErrorKind, ErrorKind] = {
    StorageErrorKind.NOT_FOUND: ErrorKind.NOT_FOUND,
    StorageErrorKind.DUPLICATE_EMAIL: ErrorKind.ALREADY_EXISTS,
    StorageErrorKind.QUERY_FAILED: ErrorKind.INTERNAL,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Domain service for user accounts"""

    def __init__(
        self,
        user_repository: UserRepository,
        event_publisher: Optional[EventPublisher] = None,
        storage_timeout_seconds: float = 5.0,
        publish_noop_deletes: bool = False,
    ) -> None:
        self.user_repository = user_repository
        self.event_publisher = event_publisher
        self.storage_timeout_seconds = storage_timeout_seconds
        self.publish_noop_deletes = publish_noop_deletes
        self._pending_events: Set["asyncio.Task[None]"] = set()

    async def fetch(self, user_id: str) -> User:
        """
        Get a single user by id

        Args:
            user_id: User ID (UUID string)

        Returns:
            Stored user

        Raises:
            ServiceError: INVALID_INPUT for a malformed id, NOT_FOUND when the
                user does not exist, INTERNAL on storage failure
        """
        if not is_valid_user_id(user_id):
            raise ServiceError.invalid_id(user_id)

        logger.debug("Fetching user %s", user_id)
        try:
            return await self._storage(self.user_repository.get(user_id), "get user", user_id)
        except StorageError as e:
            raise self._translate(e, "get user", user_id) from e

    async def fetch_all(self, filter_params: FilterParams, pagination: PaginationParams) -> List[User]:
        """
        List users page by page, optionally restricted to one country

        Args:
            filter_params: Listing filters (country is normalized here)
            pagination: Cursor and limit, passed to storage unchanged

        Returns:
            Users ordered by id ascending
        """
        filter_params = filter_params.normalized()
        country = filter_params.country

        try:
            if country is not None:
                if not is_valid_country_code(country):
                    raise ServiceError.invalid_country(country)
                logger.debug("Listing users in %s after %r", country, pagination.cursor)
                return await self._storage(
                    self.user_repository.list_by_country(country, pagination.cursor, pagination.limit),
                    "list users",
                )

            logger.debug("Listing users after %r", pagination.cursor)
            return await self._storage(
                self.user_repository.list_all(pagination.cursor, pagination.limit),
                "list users",
            )
        except StorageError as e:
            raise self._translate(e, "list users") from e

    async def create(self, user: User) -> User:
        """
        Create a new user

        Assigns a fresh id and timestamps, normalizes the country and replaces
        the plaintext password with its bcrypt hash before persisting.

        Args:
            user: User with plaintext password (mutated in place)

        Returns:
            The persisted user

        Raises:
            ServiceError: INVALID_INPUT for a country that is not two letters once
                normalized, ALREADY_EXISTS on email collision, INTERNAL otherwise
        """
        country = self._normalized_country(user.country)

        now = _utc_now()
        user.id = str(uuid.uuid4())
        user.created_at = now
        user.updated_at = now
        user.country = country
        user.password = await self._hash(user.password, user.id)

        try:
            await self._storage(self.user_repository.insert(user), "create user", user.id)
        except StorageError as e:
            raise self._translate(e, "create user", user.id) from e

        logger.info("Created user %s", user.id)
        self._publish(UserEvent.USER_CREATED, user.id)
        return user

    async def update(self, user: User) -> User:
        """
        Replace all mutable fields of an existing user

        Args:
            user: Full user with plaintext password

        Returns:
            The stored user, with its original created_at

        Raises:
            ServiceError: INVALID_INPUT for a malformed id or country, NOT_FOUND
                when the user does not exist, ALREADY_EXISTS on email collision
        """
        if not is_valid_user_id(user.id):
            raise ServiceError.invalid_id(user.id)
        country = self._normalized_country(user.country)

        user.updated_at = _utc_now()
        user.country = country
        user.password = await self._hash(user.password, user.id)

        try:
            stored = await self._storage(self.user_repository.update(user), "update user", user.id)
        except StorageError as e:
            raise self._translate(e, "update user", user.id) from e

        logger.info("Updated user %s", user.id)
        self._publish(UserEvent.USER_UPDATED, user.id)
        return stored

    async def delete(self, user_id: str) -> None:
        """
        Delete a user; deleting a missing user is not an error

        Args:
            user_id: User ID (UUID string)
        """
        if not is_valid_user_id(user_id):
            raise ServiceError.invalid_id(user_id)

        try:
            removed = await self._storage(self.user_repository.delete(user_id), "delete user", user_id)
        except StorageError as e:
            if e.kind is not StorageErrorKind.NOT_FOUND:
                raise self._translate(e, "delete user", user_id) from e
            removed = False

        if removed:
            logger.info("Deleted user %s", user_id)
        else:
            logger.info("Delete of user %s matched no rows", user_id)

        if removed or self.publish_noop_deletes:
            self._publish(UserEvent.USER_DELETED, user_id)

    async def check_health(self) -> None:
        """Probe the underlying store; raises ServiceError when it is unavailable"""
        try:
            await self._storage(self.user_repository.check_health(), "check health")
        except StorageError as e:
            raise self._translate(e, "check health") from e

    async def _storage(self, call: Awaitable[T], operation: str, user_id: Optional[str] = None) -> T:
        """Await a repository call bounded by the storage timeout"""
        try:
            return await asyncio.wait_for(call, timeout=self.storage_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ServiceError.internal(
                f"could not {operation}: storage timed out after {self.storage_timeout_seconds}s",
                user_id=user_id,
            ) from e

    async def _hash(self, password: str, user_id: Optional[str]) -> str:
        try:
            return await asyncio.to_thread(hash_password, password)
        except ValueError as e:
            raise ServiceError.internal(f"could not hash password: {e}", user_id=user_id) from e

    def _translate(self, error: StorageError, operation: str, user_id: Optional[str] = None) -> ServiceError:
        kind = STORAGE_ERROR_KINDS.get(error.kind, ErrorKind.INTERNAL)
        if kind is ErrorKind.NOT_FOUND:
            return ServiceError.user_not_found(user_id or "")
        if kind is ErrorKind.ALREADY_EXISTS:
            return ServiceError.user_already_exists(user_id)
        return ServiceError.internal(f"could not {operation}: {error.message}", user_id=user_id)

    def _normalized_country(self, country: str) -> str:
        normalized = normalize_country_code(country)
        if not is_valid_country_code(normalized):
            raise ServiceError.invalid_country(normalized)
        return normalized

    def _publish(self, event: UserEvent, data: Any) -> None:
        """
        Hand an event to the publisher without waiting for it

        The producer call may block on broker metadata, so it runs in a worker
        thread. The caller's response never depends on the outcome.
        """
        if self.event_publisher is None:
            return
        task = asyncio.create_task(asyncio.to_thread(self.event_publisher.publish, event, data))
        self._pending_events.add(task)
        task.add_done_callback(functools.partial(self._on_published, event, data))

    def _on_published(self, event: UserEvent, data: Any, task: "asyncio.Task[None]") -> None:
        self._pending_events.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Failed to publish %s for %s: %s", event.value, data, error)

    async def drain_events(self) -> None:
        """Wait for every event handed to the publisher so far"""
        if self._pending_events:
            await asyncio.gather(*self._pending_events, return_exceptions=True)
