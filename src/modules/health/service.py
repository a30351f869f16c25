from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.analysis.infrastructure.vision_client import VisionModelClient
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


class HealthService:
    """Service for performing health checks on the API's collaborators."""

    def __init__(self, db: AsyncSession, vision_client: VisionModelClient):
        self.db = db
        self.vision_client = vision_client

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
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    def check_vision_model_config(self) -> HealthCheckResult:
        """Configuration-only check; the model is never called from here."""
        configured = self.vision_client.is_configured
        return HealthCheckResult(
            service="vision_model",
            status="healthy" if configured else "degraded",
            connected=configured,
            details={"model": self.vision_client.model},
            error=None if configured else "VISION_MODEL_API_KEY not configured",
        )

    async def run_all_checks(self) -> OverallHealthStatus:
        services = {
            "database": await self.check_database_health(),
            "vision_model": self.check_vision_model_config(),
        }

        overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
        if services["database"].status == "unhealthy":
            overall_status = "unhealthy"
        elif any(result.status != "healthy" for result in services.values()):
            overall_status = "degraded"

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
