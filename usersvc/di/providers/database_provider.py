from typing import TYPE_CHECKING
from ...infrastructure.db.postgres_connection import get_session_factory

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class DatabaseProvider:
    """Centralized database connection provider - single source of truth for the session factory"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register the async session factory in the container.
        Repositories get their connections from here only.
        """
        container.register_singleton("session_factory", get_session_factory())
