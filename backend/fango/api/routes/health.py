"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 if database is unreachable (readiness)
    - Oracle availability is reported but never makes the service unready
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fango.infrastructure import database
from fango.infrastructure.runtime import RecommendationRuntime, get_runtime

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "fango-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(runtime: RecommendationRuntime = Depends(get_runtime)):
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
    return {
        "status": "ready",
        "checks": {
            "database": "healthy",
            "similarity_oracle": _configured(runtime.similarity_oracle),
            "language_oracle": _configured(runtime.text_oracle),
            "listing_search": _configured(runtime.listing_search),
        },
    }


def _configured(oracle: object | None) -> str:
    return "configured" if oracle is not None else "disabled"
