"""Kafka Producer for User Events

Publishes user change events to the configured Kafka topic.
"""

import json
import logging
from typing import Any, Optional, Tuple

from kafka import KafkaProducer

from ...domain.events import EventPublisher, UserEvent

logger = logging.getLogger(__name__)


def parse_api_version(value: str) -> Optional[Tuple[int, ...]]:
    """
    Parse a broker protocol version such as ``"2.5.0"``.

    An empty value returns None, which lets the producer probe the broker.
    """
    value = value.strip()
    if not value:
        return None
    try:
        return tuple(int(part) for part in value.split("."))
    except ValueError as e:
        raise ValueError(f"invalid Kafka API version: {value!r}") from e


class KafkaEventPublisher(EventPublisher):
    """
    Kafka publisher for user events.

    Sends ``{"event": <name>, "data": <payload>}`` as JSON, keyed by the
    event name. Delivery is fire-and-forget: failures are logged from the
    send future's errback and never retried.

    ``publish`` may block while the producer waits for broker metadata, so
    callers on an event loop run it in a worker thread.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str,
        producer: Optional[KafkaProducer] = None,
        api_version: Optional[Tuple[int, ...]] = None,
    ):
        """
        Initialize Kafka publisher.

        Args:
            bootstrap_servers: Comma separated list of brokers
            topic: Topic every event is sent to
            producer: Optional pre-built producer (created lazily otherwise)
            api_version: Broker protocol version; None probes the broker
        """
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self.api_version = api_version
        self.producer: Optional[KafkaProducer] = producer

    def _create_producer(self) -> KafkaProducer:
        """
        Create and configure Kafka producer.

        Returns:
            Configured KafkaProducer instance
        """
        producer = KafkaProducer(
            bootstrap_servers=self.bootstrap_servers.split(","),
            key_serializer=lambda k: k.encode("utf-8"),
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            api_version=self.api_version,
            acks=1,
            request_timeout_ms=5000,
            max_block_ms=5000,
        )
        logger.info(f"Created Kafka producer: topic={self.topic}, bootstrap_servers={self.bootstrap_servers}")
        return producer

    def _get_producer(self) -> KafkaProducer:
        if self.producer is None:
            self.producer = self._create_producer()
        return self.producer

    def connect(self) -> None:
        """Build the producer now instead of on the first event."""
        self._get_producer()

    def publish(self, event: UserEvent, data: Any) -> None:
        """
        Publish a user event.

        Args:
            event: Event name
            data: JSON serializable payload (the user id for user events)
        """
        name = event.value if isinstance(event, UserEvent) else str(event)
        future = self._get_producer().send(self.topic, key=name, value={"event": name, "data": data})
        future.add_errback(self._on_send_error, name)
        logger.debug(f"Queued {name} event on topic {self.topic}")

    def _on_send_error(self, name: str, exc: BaseException) -> None:
        logger.warning(f"Failed to deliver {name} event to {self.topic}: {exc}")

    def close(self) -> None:
        """Flush pending messages and close the producer."""
        if self.producer is None:
            return
        self.producer.flush()
        self.producer.close()
        self.producer = None
        logger.info("Kafka producer closed")
