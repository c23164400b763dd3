# Standard library imports
from pathlib import Path
import asyncio
from contextlib import asynccontextmanager
import logging

# External package imports
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

# Local application imports
from .api.v1 import users_router, health_router
from .core.config import get_settings
from .core.logging_config import configure_logging
from .di.container import get_container, reset_container
from .domain.events import EventPublisher
from .infrastructure.db.migrations import upgrade
from .infrastructure.db.postgres_connection import dispose_engine, get_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Applies database migrations on startup (unless disabled) and connects the
    event publisher. On shutdown the publisher is flushed and the connection
    pool released.
    """
    settings = get_settings()

    if settings.run_migrations:
        try:
            await upgrade(get_engine())
        except Exception as e:
            logger.error(f"Failed to apply database migrations: {e}", exc_info=True)
            raise
    else:
        logger.info("RUN_MIGRATIONS disabled, skipping schema upgrade")

    container = get_container()

    # Producer setup blocks on broker metadata; keep it off the event loop
    publisher = container.get(EventPublisher)
    if publisher is not None:
        try:
            await asyncio.to_thread(publisher.connect)
        except Exception as e:
            logger.warning(f"Event publisher not connected, will retry on first event: {e}")

    logger.info("User service started")

    yield

    # Shutdown: flush pending events, then close the pool
    if publisher is not None:
        try:
            await asyncio.to_thread(publisher.close)
        except Exception as e:
            logger.error(f"Error closing event publisher: {e}", exc_info=True)

    await dispose_engine()
    reset_container()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - Logging configuration
    - API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file before settings are read
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title="User Service API",
        version="1.0.0",
        description="CRUD service for user accounts",
        lifespan=lifespan
    )

    # Register API routers
    application.include_router(users_router, prefix="/api/v1/users")
    application.include_router(health_router, prefix="/api/v1")

    return application


# Create application instance
app = create_application()


def run() -> None:
    """Serve the application with uvicorn (SIGINT/SIGTERM stop it)"""
    settings = get_settings()
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)
