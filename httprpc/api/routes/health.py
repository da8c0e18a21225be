"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 until the dispatcher is initialized (readiness)
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from httprpc import __version__

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "httprpc",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — the service contract has been loaded and indexed."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "dispatcher_not_initialized",
            },
        )
    return {
        "status": "ready",
        "checks": {
            "contract": dispatcher.contract.__name__,
            "operations": len(dispatcher.registry),
        },
    }
