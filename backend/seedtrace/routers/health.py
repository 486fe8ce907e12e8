"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from seedtrace.config import settings
from seedtrace.database import engine

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check for load balancer (no DB/Redis check).

    Returns 200 OK if the service is running.
    """
    return {
        "status": "ok",
        "service": "SeedTrace",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check: the database must answer, Redis only when the
    resolution cache is enabled.

    Returns 503 if a required dependency is down.
    """
    checks = {
        "service": "ok",
        "database": "unknown",
        "redis": "disabled",
    }
    overall_healthy = True

    # Check database connection
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    # Check Redis connection
    if settings.resolution_cache_enabled:
        try:
            from seedtrace.utils.cache import get_redis

            redis_client = await get_redis()
            await redis_client.ping()
            checks["redis"] = "ok"
        except Exception as e:
            # Cache is an optimisation; resolution falls back to the database
            checks["redis"] = f"error: {str(e)[:100]}"

    return_status = status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=return_status,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "SeedTrace",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
