"""
Health check route.
"""

from fastapi import APIRouter, Request, Response, status

from glaneur.config.settings import get_settings
from glaneur.di.container import get_container
from glaneur.infrastructure.monitoring import get_logger
from glaneur.presentation.api.middleware.error_handler import (
    API_VERSION,
    request_id_of,
)

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request, response: Response):
    """
    Service health with per-component status.

    Returns 503 when the database is unreachable. Redis is reported only
    when enabled.
    """
    container = get_container()
    components = {}

    try:
        components["database"] = (
            "healthy" if await container.database.health_check() else "unhealthy"
        )
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        components["database"] = "unhealthy"

    if get_settings().REDIS_ENABLED:
        components["cache"] = (
            "healthy" if await container.cache_client.ping() else "unhealthy"
        )

    healthy = all(value == "healthy" for value in components.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "success": healthy,
        "data": {
            "status": "ok" if healthy else "degraded",
            "api": API_VERSION,
            "components": components,
        },
        "requestId": request_id_of(request),
    }
