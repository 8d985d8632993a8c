"""Health check endpoints.

Liveness is stateless; readiness also checks the database and the
keyword table.
"""

from fastapi import APIRouter

from orcasmart import __version__
from orcasmart.catalog.keyword_table import get_keyword_table
from orcasmart.config import settings
from orcasmart.infra.database import verify_db_connection
from orcasmart.infra.logging import get_logger
from orcasmart.schemas.common import HealthResponse

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Basic health check.

    Returns 200 if service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={},
    )


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready() -> HealthResponse:
    """Readiness check.

    Verifies all dependencies are available:
    - Database connectivity
    - Keyword table loaded
    """
    checks: dict[str, bool] = {"database": await verify_db_connection()}

    try:
        checks["keyword_table"] = bool(get_keyword_table().groups)
    except (OSError, ValueError) as e:
        logger.warning("Keyword table check failed", error=str(e))
        checks["keyword_table"] = False

    all_healthy = all(checks.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=__version__,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """Liveness check.

    Basic check that service is responding.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={"alive": True},
    )
