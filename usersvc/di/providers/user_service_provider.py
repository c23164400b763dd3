from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.events import EventPublisher
from ...domain.repositories.user_repository import UserRepository
from ...application.services.user_service import UserService

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class UserServiceProvider:
    """User service provider - services are created on-demand via factories"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()

        container.register_factory(
            UserService,
            lambda: UserService(
                user_repository=container.get(UserRepository),
                event_publisher=container.get(EventPublisher),
                storage_timeout_seconds=settings.storage_timeout_seconds,
                publish_noop_deletes=settings.publish_noop_deletes,
            )
        )
