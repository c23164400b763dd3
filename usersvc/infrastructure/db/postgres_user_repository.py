# Standard library imports
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# External package imports
from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from ...domain.repositories.user_repository import UserRepository
from ...domain.repositories.errors import StorageError, StorageErrorKind
from ...domain.models.user import User
from ...domain.constants import UserFields
from .models import UserRecord
from .postgres_connection import get_session_factory

logger = logging.getLogger(__name__)

# unique_violation: https://www.postgresql.org/docs/current/errcodes-appendix.html
_PG_UNIQUE_VIOLATION = "23505"
_SQLITE_UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"

# Errors that mean the store itself failed (driver errors surface as OSError
# when the connection cannot be established)
_STORE_ERRORS = (SQLAlchemyError, OSError)

_users = UserRecord.__table__


def _is_unique_violation(error: IntegrityError) -> bool:
    """Classify an IntegrityError by driver error code"""
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == _PG_UNIQUE_VIOLATION:
            return True
        if getattr(candidate, "sqlite_errorname", None) == _SQLITE_UNIQUE_VIOLATION:
            return True
    return False


def _parse_id(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PostgresUserRepository(UserRepository):
    """Relational (PostgreSQL) implementation of UserRepository"""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None) -> None:
        self.session_factory = session_factory if session_factory is not None else get_session_factory()

    async def get(self, user_id: str) -> User:
        """
        Find user by primary key

        Args:
            user_id: User ID (UUID string)

        Returns:
            User domain model

        Raises:
            StorageError: NOT_FOUND when no row matches, QUERY_FAILED otherwise
        """
        record_id = _parse_id(user_id)
        if record_id is None:
            raise StorageError(StorageErrorKind.NOT_FOUND, f"could not get user '{user_id}'", user_id=user_id)

        try:
            async with self.session_factory() as session:
                result = await session.execute(select(_users).where(_users.c.id == record_id))
                row = result.mappings().first()
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not get user: {e}", user_id=user_id) from e

        if row is None:
            raise StorageError(StorageErrorKind.NOT_FOUND, f"could not get user '{user_id}'", user_id=user_id)
        return self._row_to_user(row)

    async def list_all(self, cursor: str, limit: int) -> List[User]:
        return await self._list(None, cursor, limit)

    async def list_by_country(self, country: str, cursor: str, limit: int) -> List[User]:
        return await self._list(country, cursor, limit)

    async def _list(self, country: Optional[str], cursor: str, limit: int) -> List[User]:
        """
        Keyset pagination over users ordered by id ascending

        Args:
            country: Optional country filter
            cursor: Last id already seen; empty string for the first page
            limit: Maximum number of rows

        Returns:
            Up to ``limit`` users with id strictly greater than cursor
        """
        statement = select(_users)
        if country is not None:
            statement = statement.where(_users.c.country == country)
        if cursor:
            cursor_id = _parse_id(cursor)
            if cursor_id is None:
                raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not get users: invalid cursor '{cursor}'")
            statement = statement.where(_users.c.id > cursor_id)
        statement = statement.order_by(_users.c.id.asc()).limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(statement)
                rows = result.mappings().all()
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not get users: {e}") from e

        return [self._row_to_user(row) for row in rows]

    async def insert(self, user: User) -> None:
        """
        Insert a new user row

        Raises:
            StorageError: DUPLICATE_EMAIL on email collision, QUERY_FAILED otherwise
        """
        values = self._user_to_values(user)
        values[UserFields.CREATED_AT] = user.created_at

        try:
            async with self.session_factory.begin() as session:
                await session.execute(insert(_users).values(**values))
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise StorageError(
                    StorageErrorKind.DUPLICATE_EMAIL, "could not insert user: email already exists", user_id=user.id
                ) from e
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not insert user: {e}", user_id=user.id) from e
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not insert user: {e}", user_id=user.id) from e

    async def update(self, user: User) -> User:
        """
        Full-row update by id (created_at is never touched)

        Returns:
            The stored user after the update

        Raises:
            StorageError: NOT_FOUND when zero rows matched, DUPLICATE_EMAIL on
                email collision, QUERY_FAILED otherwise
        """
        record_id = _parse_id(user.id)
        if record_id is None:
            raise StorageError(StorageErrorKind.NOT_FOUND, f"could not update user '{user.id}'", user_id=user.id)

        values = self._user_to_values(user)
        del values[UserFields.ID]
        statement = update(_users).where(_users.c.id == record_id).values(**values).returning(*_users.c)

        try:
            async with self.session_factory.begin() as session:
                result = await session.execute(statement)
                row = result.mappings().first()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise StorageError(
                    StorageErrorKind.DUPLICATE_EMAIL, "could not update user: email already exists", user_id=user.id
                ) from e
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not update user: {e}", user_id=user.id) from e
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not update user: {e}", user_id=user.id) from e

        if row is None:
            raise StorageError(StorageErrorKind.NOT_FOUND, f"could not update user '{user.id}'", user_id=user.id)
        return self._row_to_user(row)

    async def delete(self, user_id: str) -> bool:
        """
        Delete user by id

        Returns:
            True when a row was removed, False when nothing matched
        """
        record_id = _parse_id(user_id)
        if record_id is None:
            return False

        try:
            async with self.session_factory.begin() as session:
                result = await session.execute(delete(_users).where(_users.c.id == record_id))
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not delete user: {e}", user_id=user_id) from e

        return result.rowcount > 0

    async def check_health(self) -> None:
        """Ping the database with a trivial query"""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except _STORE_ERRORS as e:
            raise StorageError(StorageErrorKind.QUERY_FAILED, f"could not ping database: {e}") from e

    def _row_to_user(self, row: RowMapping) -> User:
        """
        Convert a users row to User domain model

        Args:
            row: Row mapping keyed by column name

        Returns:
            User domain model
        """
        return User(
            id=str(row[UserFields.ID]),
            first_name=row[UserFields.FIRST_NAME],
            last_name=row[UserFields.LAST_NAME],
            nickname=row[UserFields.NICKNAME],
            email=row[UserFields.EMAIL],
            password=row[UserFields.PASSWORD],
            country=row[UserFields.COUNTRY],
            created_at=_as_utc(row[UserFields.CREATED_AT]),
            updated_at=_as_utc(row[UserFields.UPDATED_AT]),
        )

    def _user_to_values(self, user: User) -> Dict[str, Any]:
        """
        Convert User domain model to column values (created_at excluded)

        Args:
            user: User domain model

        Returns:
            Dictionary ready for INSERT/UPDATE
        """
        return {
            UserFields.ID: _parse_id(user.id),
            UserFields.FIRST_NAME: user.first_name,
            UserFields.LAST_NAME: user.last_name,
            UserFields.NICKNAME: user.nickname,
            UserFields.PASSWORD: user.password,
            UserFields.EMAIL: user.email,
            UserFields.COUNTRY: user.country,
            UserFields.UPDATED_AT: user.updated_at,
        }
