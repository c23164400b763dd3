import logging
from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.events import EventPublisher
from ...infrastructure.messaging.kafka_publisher import KafkaEventPublisher, parse_api_version

if TYPE_CHECKING:
    from ..base_container import BaseContainer

logger = logging.getLogger(__name__)


class MessagingProvider:
    """Event publisher provider - publishing is disabled when no brokers are configured"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()

        if not settings.kafka_bootstrap_servers:
            logger.info("KAFKA_BOOTSTRAP_SERVERS not set, user events will not be published")
            container.register_singleton(EventPublisher, None)
            return

        container.register_singleton(
            EventPublisher,
            KafkaEventPublisher(
                bootstrap_servers=settings.kafka_bootstrap_servers,
                topic=settings.kafka_topic,
                api_version=parse_api_version(settings.kafka_api_version),
            )
        )
