"""Storage error vocabulary - what the storage adapter reports to the service"""

from enum import Enum
from typing import Optional


class StorageErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    DUPLICATE_EMAIL = "duplicate_email"
    QUERY_FAILED = "query_failed"


class StorageError(Exception):
    """Raised by repository implementations instead of driver-specific errors"""

    def __init__(self, kind: StorageErrorKind, message: str, user_id: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.user_id = user_id
