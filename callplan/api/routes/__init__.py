"""
API Routes

Modular route definitions for the call-plan dashboard API.
"""
from callplan.api.routes.agenda import router as agenda_router
from callplan.api.routes.health import router as health_router
from callplan.api.routes.metrics import router as metrics_router
from callplan.api.routes.plan import router as plan_router
from callplan.api.routes.reminders import router as reminders_router

__all__ = [
    "agenda_router",
    "health_router",
    "metrics_router",
    "plan_router",
    "reminders_router",
]
