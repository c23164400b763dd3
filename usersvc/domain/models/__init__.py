from .user import User, FilterParams, PaginationParams

__all__ = ["User", "FilterParams", "PaginationParams"]
