"""
Health, readiness and metrics endpoints.

Readiness means a connection can be taken from the pool and answer
`SELECT 1`; POST /users would fail otherwise.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from user_service.database import Database, get_db
from user_service.models import HealthStatus

router = APIRouter(tags=["monitoring"])

# Track application start time
START_TIME = time.time()


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request, db: Database = Depends(get_db)):
    """
    Health check endpoint.
    
    Returns the overall health status of the service including
    database connectivity, uptime and application version.
    """
    db_healthy = await db.health_check()
    
    return HealthStatus(
        status="healthy" if db_healthy else "unhealthy",
        version=request.app.state.settings.app_version,
        database="connected" if db_healthy else "disconnected",
        uptime_seconds=time.time() - START_TIME,
        timestamp=datetime.now(timezone.utc)
    )


@router.get("/health/live")
async def liveness_check():
    """
    Liveness probe.
    
    Does not check dependencies.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(db: Database = Depends(get_db)):
    """
    Readiness probe.
    
    Returns 503 while no pooled connection can reach PostgreSQL.
    """
    db_healthy = await db.health_check()
    
    if not db_healthy:
        return Response(
            content='{"status": "not ready", "reason": "database disconnected"}',
            status_code=503,
            media_type="application/json"
        )
    
    return {"status": "ready"}


@router.get("/metrics")
async def metrics(request: Request):
    """Prometheus metrics in text format."""
    if not request.app.state.settings.enable_metrics:
        return Response(status_code=404)
    
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/info")
async def info(request: Request, db: Database = Depends(get_db)):
    """
    Runtime information: version, write deadline and pool occupancy.

    Pool numbers come from the live asyncpg pool, so a pool stuck at
    ``in_use == max_size`` explains requests failing on acquire.
    """
    settings = request.app.state.settings
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "uptime_seconds": time.time() - START_TIME,
        "request_timeout_seconds": settings.request_timeout,
        "database_pool": db.pool_stats(),
    }
