from .user_repository import UserRepository
from .errors import StorageError, StorageErrorKind

__all__ = ["UserRepository", "StorageError", "StorageErrorKind"]
