"""
Unit tests for UserService (repository and publisher mocked).
"""
import asyncio
import time
import uuid
from unittest.mock import MagicMock

import pytest

from usersvc.application.services.user_service import UserService
from usersvc.core.security import verify_password
from usersvc.domain.errors import ErrorKind, ServiceError
from usersvc.domain.events import EventPublisher, UserEvent
from usersvc.domain.models.user import FilterParams, PaginationParams, User
from usersvc.domain.repositories.errors import StorageError, StorageErrorKind

USER_ID = "0b9f3c9e-6a3c-4f57-9d0e-7f1c2b3a4d5e"


@pytest.fixture
def mock_publisher():
    return MagicMock(spec=EventPublisher)


@pytest.fixture
def service(mock_user_repo, mock_publisher, mock_settings):
    return UserService(mock_user_repo, event_publisher=mock_publisher)


def _new_user(**overrides):
    fields = {
        "first_name": "Michael",
        "last_name": "Jackson",
        "nickname": "MJ",
        "email": "michael.jackson@example.com",
        "password": "Billie#Jean1",
        "country": " us",
    }
    fields.update(overrides)
    return User(**fields)


class TestCreate:
    """Tests for UserService.create"""

    @pytest.mark.asyncio
    async def test_assigns_id_timestamps_and_hash(self, service, mock_user_repo, mock_publisher):
        result = await service.create(_new_user())

        assert uuid.UUID(result.id).version == 4
        assert result.created_at is not None
        assert result.created_at == result.updated_at
        assert result.created_at.tzinfo is not None
        assert result.country == "US"
        assert result.password != "Billie#Jean1"
        assert verify_password("Billie#Jean1", result.password)

        mock_user_repo.insert.assert_awaited_once_with(result)
        await service.drain_events()
        mock_publisher.publish.assert_called_once_with(UserEvent.USER_CREATED, result.id)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, mock_user_repo, mock_publisher):
        mock_user_repo.insert.side_effect = StorageError(StorageErrorKind.DUPLICATE_EMAIL, "duplicate")

        with pytest.raises(ServiceError) as exc:
            await service.create(_new_user())

        assert exc.value.kind is ErrorKind.ALREADY_EXISTS
        assert isinstance(exc.value.__cause__, StorageError)
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_failure_is_internal(self, service, mock_user_repo):
        mock_user_repo.insert.side_effect = StorageError(StorageErrorKind.QUERY_FAILED, "connection refused")

        with pytest.raises(ServiceError) as exc:
            await service.create(_new_user())

        assert exc.value.kind is ErrorKind.INTERNAL
        assert "connection refused" in exc.value.message

    @pytest.mark.asyncio
    async def test_publish_failure_is_not_fatal(self, service, mock_publisher, caplog):
        mock_publisher.publish.side_effect = RuntimeError("broker down")

        result = await service.create(_new_user())
        assert result.id

        with caplog.at_level("WARNING"):
            await service.drain_events()
        assert "user.created" in caplog.text
        assert "broker down" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("country", [" u", "u ", "12", "U1", "usa"])
    async def test_invalid_country_after_normalization(self, service, mock_user_repo, mock_publisher, country):
        with pytest.raises(ServiceError) as exc:
            await service.create(_new_user(country=country))

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        assert exc.value.field == "country"
        mock_user_repo.insert.assert_not_awaited()
        await service.drain_events()
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_publisher(self, mock_user_repo, mock_settings):
        service = UserService(mock_user_repo)
        result = await service.create(_new_user())
        assert result.id


class TestFetch:
    """Tests for UserService.fetch"""

    @pytest.mark.asyncio
    async def test_returns_user(self, service, mock_user_repo, mock_publisher, stored_user):
        mock_user_repo.get.return_value = stored_user

        assert await service.fetch(stored_user.id) is stored_user
        mock_user_repo.get.assert_awaited_once_with(stored_user.id)
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_id_skips_storage(self, service, mock_user_repo):
        with pytest.raises(ServiceError) as exc:
            await service.fetch("not-a-uuid")

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        assert exc.value.field == "id"
        mock_user_repo.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_found(self, service, mock_user_repo):
        mock_user_repo.get.side_effect = StorageError(StorageErrorKind.NOT_FOUND, "no rows")

        with pytest.raises(ServiceError) as exc:
            await service.fetch(USER_ID)

        assert exc.value.kind is ErrorKind.NOT_FOUND
        assert exc.value.user_id == USER_ID

    @pytest.mark.asyncio
    async def test_storage_timeout_is_internal(self, mock_user_repo, mock_settings):
        async def slow_get(user_id):
            await asyncio.sleep(1)

        mock_user_repo.get.side_effect = slow_get
        service = UserService(mock_user_repo, storage_timeout_seconds=0.01)

        with pytest.raises(ServiceError) as exc:
            await service.fetch(USER_ID)

        assert exc.value.kind is ErrorKind.INTERNAL
        assert "timed out" in exc.value.message


class TestFetchAll:
    """Tests for UserService.fetch_all"""

    @pytest.mark.asyncio
    async def test_without_country_lists_all(self, service, mock_user_repo, stored_user):
        mock_user_repo.list_all.return_value = [stored_user]

        users = await service.fetch_all(FilterParams(), PaginationParams(cursor=USER_ID, limit=10))

        assert users == [stored_user]
        mock_user_repo.list_all.assert_awaited_once_with(USER_ID, 10)
        mock_user_repo.list_by_country.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_country_is_normalized(self, service, mock_user_repo):
        mock_user_repo.list_by_country.return_value = []

        await service.fetch_all(FilterParams(country="br"), PaginationParams())

        mock_user_repo.list_by_country.assert_awaited_once_with("BR", "", 100)

    @pytest.mark.asyncio
    async def test_invalid_country(self, service, mock_user_repo):
        with pytest.raises(ServiceError) as exc:
            await service.fetch_all(FilterParams(country="1A"), PaginationParams())

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        assert exc.value.field == "country"
        mock_user_repo.list_by_country.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_failure(self, service, mock_user_repo):
        mock_user_repo.list_all.side_effect = StorageError(StorageErrorKind.QUERY_FAILED, "boom")

        with pytest.raises(ServiceError) as exc:
            await service.fetch_all(FilterParams(), PaginationParams())

        assert exc.value.kind is ErrorKind.INTERNAL


class TestUpdate:
    """Tests for UserService.update"""

    @pytest.mark.asyncio
    async def test_updates_and_returns_stored_row(self, service, mock_user_repo, mock_publisher, stored_user):
        mock_user_repo.update.return_value = stored_user
        user = _new_user(id=USER_ID, country="gb")

        result = await service.update(user)

        assert result is stored_user
        sent = mock_user_repo.update.await_args.args[0]
        assert sent.country == "GB"
        assert sent.updated_at is not None
        assert verify_password("Billie#Jean1", sent.password)
        await service.drain_events()
        mock_publisher.publish.assert_called_once_with(UserEvent.USER_UPDATED, USER_ID)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("country", [" u", "12"])
    async def test_invalid_country_after_normalization(self, service, mock_user_repo, country):
        with pytest.raises(ServiceError) as exc:
            await service.update(_new_user(id=USER_ID, country=country))

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        assert exc.value.field == "country"
        mock_user_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_id(self, service, mock_user_repo):
        with pytest.raises(ServiceError) as exc:
            await service.update(_new_user(id="abc"))

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        mock_user_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "storage_kind,expected",
        [
            (StorageErrorKind.NOT_FOUND, ErrorKind.NOT_FOUND),
            (StorageErrorKind.DUPLICATE_EMAIL, ErrorKind.ALREADY_EXISTS),
            (StorageErrorKind.QUERY_FAILED, ErrorKind.INTERNAL),
        ],
    )
    async def test_storage_errors_translated(self, service, mock_user_repo, mock_publisher, storage_kind, expected):
        mock_user_repo.update.side_effect = StorageError(storage_kind, "failed")

        with pytest.raises(ServiceError) as exc:
            await service.update(_new_user(id=USER_ID))

        assert exc.value.kind is expected
        mock_publisher.publish.assert_not_called()


class TestDelete:
    """Tests for UserService.delete"""

    @pytest.mark.asyncio
    async def test_publishes_when_removed(self, service, mock_user_repo, mock_publisher):
        mock_user_repo.delete.return_value = True

        await service.delete(USER_ID)

        mock_user_repo.delete.assert_awaited_once_with(USER_ID)
        await service.drain_events()
        mock_publisher.publish.assert_called_once_with(UserEvent.USER_DELETED, USER_ID)

    @pytest.mark.asyncio
    async def test_missing_user_is_silent(self, service, mock_user_repo, mock_publisher):
        mock_user_repo.delete.return_value = False

        await service.delete(USER_ID)

        await service.drain_events()
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_not_found_is_swallowed(self, service, mock_user_repo):
        mock_user_repo.delete.side_effect = StorageError(StorageErrorKind.NOT_FOUND, "gone")

        await service.delete(USER_ID)

    @pytest.mark.asyncio
    async def test_noop_delete_published_when_enabled(self, mock_user_repo, mock_publisher, mock_settings):
        mock_user_repo.delete.return_value = False
        service = UserService(mock_user_repo, event_publisher=mock_publisher, publish_noop_deletes=True)

        await service.delete(USER_ID)

        await service.drain_events()
        mock_publisher.publish.assert_called_once_with(UserEvent.USER_DELETED, USER_ID)

    @pytest.mark.asyncio
    async def test_query_failure(self, service, mock_user_repo, mock_publisher):
        mock_user_repo.delete.side_effect = StorageError(StorageErrorKind.QUERY_FAILED, "boom")

        with pytest.raises(ServiceError) as exc:
            await service.delete(USER_ID)

        assert exc.value.kind is ErrorKind.INTERNAL
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_id(self, service):
        with pytest.raises(ServiceError) as exc:
            await service.delete("")
        assert exc.value.kind is ErrorKind.INVALID_INPUT


class TestCheckHealth:
    """Tests for UserService.check_health"""

    @pytest.mark.asyncio
    async def test_healthy(self, service, mock_user_repo, mock_publisher):
        await service.check_health()
        mock_user_repo.check_health.assert_awaited_once()
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_unhealthy(self, service, mock_user_repo):
        mock_user_repo.check_health.side_effect = StorageError(StorageErrorKind.QUERY_FAILED, "down")

        with pytest.raises(ServiceError) as exc:
            await service.check_health()
        assert exc.value.kind is ErrorKind.INTERNAL


async def _run_with_ticker(operation):
    """Await operation while a ticker records the longest gap between loop turns"""
    gaps = []
    done = asyncio.Event()

    async def ticker():
        last = time.monotonic()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = time.monotonic()
            gaps.append(now - last)
            last = now

    ticker_task = asyncio.create_task(ticker())
    await asyncio.sleep(0.03)

    started = time.monotonic()
    await operation
    elapsed = time.monotonic() - started

    await asyncio.sleep(0.05)
    done.set()
    await ticker_task
    return elapsed, max(gaps)


class TestPublishingOffLoop:
    """A slow broker must not hold up responses or the event loop"""

    @pytest.fixture
    def slow_publisher(self, mock_publisher):
        mock_publisher.publish.side_effect = lambda event, data: time.sleep(0.5)
        return mock_publisher

    @pytest.mark.asyncio
    async def test_delete_returns_before_publish_completes(self, service, mock_user_repo, slow_publisher):
        mock_user_repo.delete.return_value = True

        elapsed, longest_gap = await _run_with_ticker(service.delete(USER_ID))

        assert elapsed < 0.25
        assert longest_gap < 0.25

        await service.drain_events()
        slow_publisher.publish.assert_called_once_with(UserEvent.USER_DELETED, USER_ID)

    @pytest.mark.asyncio
    async def test_create_returns_before_publish_completes(self, service, slow_publisher):
        elapsed, longest_gap = await _run_with_ticker(service.create(_new_user()))

        assert elapsed < 0.25
        assert longest_gap < 0.25

        await service.drain_events()
        slow_publisher.publish.assert_called_once()

    @pytest.mark.asyncio
    async def test_drain_without_pending_events(self, service, mock_publisher):
        await service.drain_events()
        mock_publisher.publish.assert_not_called()
