"""
Metrics Endpoints

Prometheus-compatible metrics for observability.
"""
from fastapi import APIRouter, Request
from fastapi.responses import Response
from loguru import logger

from callplan.utils.metrics import metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics(request: Request):
    """
    Prometheus metrics endpoint.

    Includes:
    - Outcomes logged and failed, by context
    - Reminders created
    - Poller failures
    - Uncalled contacts remaining
    - Backend call latency

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    try:
        controller = getattr(request.app.state, "controller", None)
        if controller is not None:
            metrics.queue_remaining.set(len(controller.queue.uncalled))

        return Response(
            content=metrics.export(),
            media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    except Exception as e:
        logger.error(f"Failed to export metrics: {e}")
        return Response(
            content=f"# Error exporting metrics: {e}\n",
            media_type="text/plain",
            status_code=500
        )
