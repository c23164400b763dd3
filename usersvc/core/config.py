# Standard library imports
import os
from typing import Final, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the service.
    All settings are loaded from environment variables with sensible defaults.
    """

    def __init__(self) -> None:
        # Database Configuration
        self.postgres_user: Final[str] = os.getenv("POSTGRES_USER", "user")
        self.postgres_password: Final[str] = os.getenv("POSTGRES_PASSWORD", "password")
        self.postgres_db: Final[str] = os.getenv("POSTGRES_DB", "usrsvc")
        self.postgres_host: Final[str] = os.getenv("POSTGRES_HOST", "db")
        self.postgres_port: Final[int] = int(os.getenv("POSTGRES_PORT", "5432"))
        self.database_url: Final[str] = os.getenv("DATABASE_URL", "") or (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        self.db_pool_size: Final[int] = int(os.getenv("DB_POOL_SIZE", "5"))
        self.db_max_overflow: Final[int] = int(os.getenv("DB_MAX_OVERFLOW", "10"))
        self.run_migrations: Final[bool] = _env_bool("RUN_MIGRATIONS", "true")

        # Timeouts (seconds)
        self.request_timeout_seconds: Final[float] = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "5"))
        self.storage_timeout_seconds: Final[float] = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "5"))

        # Password hashing
        self.bcrypt_rounds: Final[int] = int(os.getenv("BCRYPT_ROUNDS", "12"))

        # Kafka Configuration (publishing is disabled when no servers are set)
        self.kafka_bootstrap_servers: Final[str] = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "")
        self.kafka_topic: Final[str] = os.getenv("KAFKA_TOPIC", "user-events")
        # Pinned so the producer skips version probing; empty probes the broker
        self.kafka_api_version: Final[str] = os.getenv("KAFKA_API_VERSION", "2.5.0")
        self.publish_noop_deletes: Final[bool] = _env_bool("PUBLISH_NOOP_DELETES", "false")

        # Server / logging
        self.log_level: Final[str] = os.getenv("LOG_LEVEL", "INFO")
        self.http_host: Final[str] = os.getenv("HTTP_HOST", "0.0.0.0")
        self.http_port: Final[int] = int(os.getenv("HTTP_PORT", "8000"))


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
