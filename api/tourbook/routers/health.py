"""
Health Check Endpoints
"""
from fastapi import APIRouter, Depends
import redis.asyncio as redis

from tourbook.utils.redis import get_redis
from tourbook.utils.mongodb import get_mongodb

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "tourbook-api"}


@router.get("/health/ready")
async def readiness_check(
    cache: redis.Redis = Depends(get_redis),
    mongodb = Depends(get_mongodb),
):
    """
    Readiness check - verifies all dependencies are available
    """
    checks = {
        "mongodb": False,
        "redis": False,
    }

    # Check MongoDB
    try:
        await mongodb.command("ping")
        checks["mongodb"] = True
    except Exception as e:
        checks["mongodb_error"] = str(e)

    # Check Redis (a no-op cache answers False)
    try:
        checks["redis"] = bool(await cache.ping())
    except Exception as e:
        checks["redis_error"] = str(e)

    # Redis only backs the category cache, so MongoDB alone decides readiness
    return {
        "status": "ready" if checks["mongodb"] else "unavailable",
        "cache": "enabled" if checks["redis"] else "disabled",
        "checks": checks,
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness check - is the service running"""
    return {"status": "alive"}
