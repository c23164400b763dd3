from .database_provider import DatabaseProvider
from .repository_provider import RepositoryProvider
from .messaging_provider import MessagingProvider
from .user_service_provider import UserServiceProvider


__all__ = [
    "DatabaseProvider",
    "RepositoryProvider",
    "MessagingProvider",
    "UserServiceProvider",
]
