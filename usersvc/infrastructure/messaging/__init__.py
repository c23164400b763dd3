"""Messaging infrastructure for user events"""

from .kafka_publisher import KafkaEventPublisher

__all__ = ["KafkaEventPublisher"]
