from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.api.core.exceptions.base import KeyGateException
from src.core.base import BaseService
from src.modules.keys.api_keys import ApiKeyStore
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService(BaseService):
    """Service for performing health checks on the key service."""

    async def check_database_health(self) -> HealthCheckResult:
        """Database connection health check."""
        try:
            result = await self.db.execute(text("SELECT 1 as test"))
            test_value = result.scalar()

            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": test_value},
            )
        except SQLAlchemyError as e:
            logger.error("Database health check error", error=str(e))
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=type(e).__name__,
            )

    async def check_api_keys_health(self) -> HealthCheckResult:
        """Key table health check: the table is readable."""
        try:
            active = await ApiKeyStore(self.db).active_count()
        except KeyGateException:
            return HealthCheckResult(
                service="api_keys",
                status="unhealthy",
                connected=False,
                details={},
                error="api_keys table unavailable",
            )

        return HealthCheckResult(
            service="api_keys",
            status="healthy",
            connected=True,
            details={"active_keys": active},
        )

    async def run_all_checks(self) -> OverallHealthStatus:
        """Run the checks in sequence (they share one session)."""
        results = [
            await self.check_database_health(),
            await self.check_api_keys_health(),
        ]

        overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
        for result in results:
            if result.status == "unhealthy":
                overall_status = "unhealthy"
            elif result.status == "degraded" and overall_status == "healthy":
                overall_status = "degraded"

        return OverallHealthStatus(
            status=overall_status,
            services={result.service: result for result in results},
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
