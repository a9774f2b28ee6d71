"""
Health and Readiness Endpoints
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from callplan import __version__

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the service is running.
    """
    return {
        "status": "healthy",
        "service": "callplan",
        "version": __version__
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe: the controller exists and today's plan has been loaded.

    Returns 200 if ready, 503 if not ready.
    """
    controller = getattr(request.app.state, "controller", None)
    if controller is None or controller.store.last_refreshed is None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "reason": "Today's plan not loaded"
            }
        )

    return {
        "status": "ready",
        "planned": len(controller.queue),
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Call Plan Dashboard API",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "metrics": "/metrics",
            "plan": "/plan",
            "reminders": "/reminders",
            "agenda": "/agenda"
        }
    }
