"""Health & Readiness Probes — liveness, readiness and rate-limiter stats.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - GET /health/rate-limit exposes size, capacity and last cleanup time

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from quizr.api.dependencies import get_rate_limiter
from quizr.core.rate_limiter import RateLimiter
import quizr.infrastructure.database as database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "quizr-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}


@router.get("/rate-limit")
async def rate_limit_stats(limiter: RateLimiter = Depends(get_rate_limiter)):
    """Process-local rate limiter statistics."""
    return {
        **limiter.stats(),
        "window_seconds": limiter.window_seconds,
        "max_requests": limiter.max_requests,
    }
