"""Health check endpoints for monitoring."""

from fastapi import APIRouter

from src.api.core.dependencies import HealthServiceDep
from src.modules.health.service import OverallHealthStatus
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(health_service: HealthServiceDep) -> OverallHealthStatus:
    """Database and key table health checks."""
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "keygate-api"}
