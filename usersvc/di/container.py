# Local application imports
from .base_container import BaseContainer
from .providers import (
    DatabaseProvider,
    MessagingProvider,
    RepositoryProvider,
    UserServiceProvider,
)


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.

    Registration order is important:
    1. Database session factory (DatabaseProvider)
    2. Repositories (RepositoryProvider) - depends on database
    3. Event publisher (MessagingProvider) - optional
    4. Services (UserServiceProvider) - depend on repositories and publisher
    """

    def __init__(self) -> None:
        super().__init__()
        self.setup()

    def setup(self) -> None:
        DatabaseProvider.register(self)
        RepositoryProvider.register(self)
        MessagingProvider.register(self)
        UserServiceProvider.register(self)


# Global container instance (singleton pattern)
_container: DIContainer | None = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)

    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


def reset_container() -> None:
    """Drop the global container so the next get_container() rebuilds it"""
    global _container
    _container = None
