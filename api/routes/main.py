"""
Service banner, health check and analytics.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from api.deps import ContextDep
from api.schemas import AnalyticsResponse, DatabaseStatsResponse, HealthResponse
from shared import __version__

router = APIRouter(tags=["main"])


@router.get("/", summary="Service banner")
def index() -> dict:
    return {"message": "hello world", "version": __version__}


@router.get("/health", response_model=HealthResponse, summary="Health check")
def health_check(context: ContextDep) -> HealthResponse:
    """Database connectivity, and cache reachability when a cache is configured."""
    database_ok = context.database.connected
    cache_ok = context.cache.ping() if context.cache.enabled else None
    healthy = database_ok and cache_ok is not False
    return HealthResponse(
        status="ok" if healthy else "degraded",
        database=database_ok,
        cache=cache_ok,
    )


@router.get("/analytics", response_model=AnalyticsResponse, summary="Usage analytics")
def get_analytics(context: ContextDep) -> AnalyticsResponse:
    analytics = context.analytics
    if not analytics.enabled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analytics are disabled",
        )

    stats = analytics.database_stats
    return AnalyticsResponse(
        requests=analytics.requests,
        db_calls=analytics.db_calls,
        database=DatabaseStatsResponse.model_validate(stats) if stats else None,
    )
