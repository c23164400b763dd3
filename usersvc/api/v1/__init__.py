from .user_controller import router as users_router
from .health_controller import router as health_router


__all__ = ["users_router", "health_router"]
