"""
FastAPI Application

Main entry point for the call-plan dashboard API.
Handles application lifecycle, error mapping and router mounting.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from callplan import __version__
from callplan.api.routes import (
    agenda_router,
    health_router,
    metrics_router,
    plan_router,
    reminders_router,
)
from callplan.config import get_settings
from callplan.core.dashboard import DashboardController
from callplan.core.exceptions import ContactNotFoundError, ServiceError, ValidationError
from callplan.repositories import AgendaStateRepository
from callplan.services import CallPlanBackend, HttpCallPlanBackend
from callplan.utils.observability import configure_logging


async def _initial_load(controller: DashboardController) -> None:
    """Startup fetch. A failing backend leaves an empty dashboard; pollers retry."""
    try:
        await controller.load_today()
        await controller.poll_status()
    except ServiceError as e:
        logger.warning(f"Initial dashboard load failed: {e}")


def create_app(
    backend: Optional[CallPlanBackend] = None,
    agenda_repo: Optional[AgendaStateRepository] = None,
) -> FastAPI:
    """
    Build the dashboard API.

    Args:
        backend: Backend to use (defaults to HttpCallPlanBackend from settings)
        agenda_repo: Local agenda state (defaults to settings.agenda_state_path)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        - Configure logging
        - Build the controller and load today's plan
        - Start the status and plan pollers

        Shutdown:
        - Cancel pollers
        - Close the backend client
        """
        settings = get_settings()
        configure_logging()
        logger.info("Starting call-plan dashboard API...")

        service = backend or HttpCallPlanBackend()
        controller = DashboardController(service, agenda_repo=agenda_repo)
        app.state.controller = controller

        await _initial_load(controller)

        poller_task = None
        if settings.enable_pollers:
            poller_task = asyncio.create_task(controller.run_pollers(settings.poll_interval_seconds))
        app.state.poller_task = poller_task

        logger.info("Dashboard API ready")

        yield

        logger.info("Shutting down dashboard API...")
        if poller_task is not None and not poller_task.done():
            poller_task.cancel()
            try:
                await poller_task
            except asyncio.CancelledError:
                logger.info("Stopped pollers")

        if isinstance(service, HttpCallPlanBackend):
            await service.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Call Plan Dashboard API",
        description="Call-plan scheduling and outcome tracking for the daily prospecting dashboard",
        version=__version__,
        lifespan=lifespan
    )

    @app.exception_handler(ContactNotFoundError)
    async def contact_not_found(request: Request, exc: ContactNotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc), "retryable": False})

    @app.exception_handler(ValidationError)
    async def validation_failed(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"error": str(exc), "retryable": False})

    @app.exception_handler(ServiceError)
    async def service_failed(request: Request, exc: ServiceError):
        logger.warning(f"Backend call failed: {exc}")
        return JSONResponse(
            status_code=502,
            content={"error": str(exc), "operation": exc.operation, "retryable": True}
        )

    app.include_router(health_router)
    app.include_router(plan_router)
    app.include_router(reminders_router)
    app.include_router(agenda_router)
    app.include_router(metrics_router)

    return app


app = create_app()
