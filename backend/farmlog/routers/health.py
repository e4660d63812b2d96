"""Health check endpoints for load balancers and monitoring."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from farmlog.config import settings
from farmlog.database import engine
from farmlog.utils.cache import get_redis
from farmlog.utils.dates import utcnow

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check (no database/Redis check)."""
    return {
        "status": "ok",
        "service": "FarmLog",
        "timestamp": utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check including the storage backend and Redis.

    Redis only backs the weather cache, so it is reported but does not make
    the service unhealthy.
    """
    checks = {
        "service": "ok",
        "storage": "unknown",
        "redis": "unknown",
    }
    overall_healthy = True

    if settings.storage_backend == "memory":
        checks["storage"] = "memory"
    else:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["storage"] = "ok"
        except Exception as e:
            checks["storage"] = f"error: {str(e)[:100]}"
            overall_healthy = False

    try:
        redis_client = await get_redis()
        await redis_client.ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {str(e)[:100]}"

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "FarmLog",
            "checks": checks,
            "timestamp": utcnow().isoformat(),
        },
    )
