# Standard library imports
import asyncio
import logging

# External package imports
from fastapi import APIRouter

# Local application imports
from ...application.dto.user_dto import HealthCheckRequest, HealthCheckResponse, ServingStatus
from ...application.services.user_service import UserService
from ...core.config import get_settings
from ...di.container import get_container

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
async def check_health(service: str = "") -> HealthCheckResponse:
    """
    Report whether the service can reach its database

    Always answers 200; a failing probe is reported as NOT_SERVING.
    """
    request = HealthCheckRequest(service=service)
    try:
        user_service = get_container().get(UserService)
        await asyncio.wait_for(user_service.check_health(), timeout=get_settings().request_timeout_seconds)
    except Exception as e:
        logger.warning(f"Health check failed for service {request.service!r}: {e!r}")
        return HealthCheckResponse(status=ServingStatus.NOT_SERVING)
    return HealthCheckResponse(status=ServingStatus.SERVING)
