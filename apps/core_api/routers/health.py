"""
Health Check Endpoints.

- GET /healthz: Liveness check (API running)
- GET /readyz: Readiness check (Postgres + Redis reachable)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from apps.core_api.deps import get_redis
from seo_obs.logging import get_logger
from seo_store.database import check_db_connection

router = APIRouter()
logger = get_logger(__name__)


@router.get("/healthz")
async def healthz():
    """
    Liveness check - is the API process running?
    """
    return {"status": "healthy", "service": "seoagent-governance-api"}


@router.get("/readyz")
async def readyz(redis: Redis = Depends(get_redis)):
    """
    Readiness check - can the policy engine reach its collaborators?

    Returns:
        200 OK if all dependencies ready
        503 Service Unavailable if any dependency fails
    """
    checks = {}

    try:
        checks["database"] = "ok" if await check_db_connection() else "failed"
    except Exception as e:
        logger.warning("readiness_check_failed", dependency="database", error=str(e))
        checks["database"] = "failed"

    try:
        await redis.ping()
        checks["redis"] = "ok"
    except Exception as e:
        logger.warning("readiness_check_failed", dependency="redis", error=str(e))
        checks["redis"] = "failed"

    if any(value != "ok" for value in checks.values()):
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})

    return {"status": "ready", "checks": checks}
