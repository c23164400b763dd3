from .models import Base, UserRecord
from .postgres_connection import create_engine, dispose_engine, get_engine, get_session_factory
from .postgres_user_repository import PostgresUserRepository

__all__ = [
    "Base",
    "UserRecord",
    "create_engine",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "PostgresUserRepository",
]
