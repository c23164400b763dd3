from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class UserEvent(str, Enum):
    """User entity change events published to the message broker"""
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"


class EventPublisher(ABC):
    """Publisher interface - fire-and-forget delivery of change events"""

    @abstractmethod
    def publish(self, event: UserEvent, data: Any) -> None:
        """Publish an event. Implementations may raise; callers treat failures as non-fatal."""
        pass

    def connect(self) -> None:
        """Open broker connections ahead of the first event (optional, may block)"""
        return None

    def close(self) -> None:
        """Release broker resources (optional)"""
        return None
