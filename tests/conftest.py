"""
Shared pytest fixtures for usersvc tests.
"""
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from usersvc.domain.models.user import User
from usersvc.domain.repositories.user_repository import UserRepository


@pytest.fixture
def mock_env():
    """Fixture to set common test environment variables."""
    env_vars = {
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "RUN_MIGRATIONS": "false",
        "BCRYPT_ROUNDS": "4",
        "KAFKA_BOOTSTRAP_SERVERS": "",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_settings():
    """Fixture to mock get_settings for tests. Patches all modules that use it."""
    mock = MagicMock()
    mock.bcrypt_rounds = 4
    mock.request_timeout_seconds = 5.0
    mock.storage_timeout_seconds = 5.0
    mock.publish_noop_deletes = False
    mock.kafka_bootstrap_servers = ""
    mock.kafka_topic = "user-events"
    mock.kafka_api_version = "2.5.0"

    # Patch at source and at use sites (modules import get_settings at load time)
    with patch("usersvc.core.config.get_settings", return_value=mock), patch(
        "usersvc.core.security.get_settings", return_value=mock
    ), patch("usersvc.api.v1.user_controller.get_settings", return_value=mock), patch(
        "usersvc.api.v1.health_controller.get_settings", return_value=mock
    ):
        yield mock


@pytest.fixture
def mock_user_repo():
    """Mock UserRepository with async methods."""
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def stored_user():
    """A user as it comes back from storage."""
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return User(
        id="0b9f3c9e-6a3c-4f57-9d0e-7f1c2b3a4d5e",
        first_name="Michael",
        last_name="Jackson",
        nickname="MJ",
        email="michael.jackson@example.com",
        password="$2b$04$abcdefghijklmnopqrstuuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0",
        country="US",
        created_at=created,
        updated_at=created,
    )
