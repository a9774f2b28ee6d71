"""
Plan Endpoints

Today's call plan grouped by tier, plus outcome logging for any context.
"""
from fastapi import APIRouter, Request

from callplan.api.models.requests import ContextRequest, LogOutcomeRequest
from callplan.core.dashboard import DashboardController
from callplan.core.outcome_machine import LogResult
from callplan.engine.buckets import time_ago
from callplan.models.enums import TIER_LABELS

router = APIRouter(prefix="/plan", tags=["Plan"])


def _serialize_result(result: LogResult) -> dict:
    return {
        "contact_id": result.contact_id,
        "outcome": str(result.outcome),
        "success": result.success,
        "state": str(result.state),
        "note": result.note,
        "active_contact_id": result.active_contact_id,
        "error": result.error,
        "retryable": result.retryable,
        "follow_up": {
            "days_offset": result.follow_up.days_offset,
            "fire_at": result.follow_up.fire_at.isoformat(),
            "duration_minutes": result.follow_up.duration_minutes,
        } if result.follow_up else None,
    }


@router.get("")
async def get_plan(request: Request):
    """
    Today's plan for the dashboard.

    Uncalled contacts are grouped into tier sections (high first); called
    contacts are listed separately with their outcome.
    """
    controller: DashboardController = request.app.state.controller
    queue = controller.queue
    now = controller.now()

    return {
        "active_contact_id": queue.active_contact_id,
        "progress": queue.progress(controller.daily_target).model_dump(mode="json"),
        "last_refreshed": time_ago(controller.store.last_refreshed, now),
        "sections": [
            {
                "tier": str(tier),
                "label": TIER_LABELS[tier],
                "contacts": [c.model_dump(mode="json") for c in contacts],
            }
            for tier, contacts in queue.tier_groups().items()
        ],
        "called": [c.model_dump(mode="json") for c in queue.called],
    }


@router.post("/{contact_id}/outcome")
async def log_outcome(contact_id: str, body: LogOutcomeRequest, request: Request):
    """
    Log a call outcome.

    A backend failure is not an HTTP error: the result comes back with
    success=false and retryable=true, and the contact stays "logging".
    """
    controller: DashboardController = request.app.state.controller
    result = await controller.log_outcome(body.context, contact_id, body.outcome, body.note)
    return _serialize_result(result)


@router.post("/{contact_id}/retry")
async def retry_outcome(contact_id: str, body: ContextRequest, request: Request):
    controller: DashboardController = request.app.state.controller
    result = await controller.retry(body.context, contact_id)
    return _serialize_result(result)


@router.post("/{contact_id}/relog")
async def relog(contact_id: str, body: ContextRequest, request: Request):
    """Clear the outcome so the contact can be logged again."""
    controller: DashboardController = request.app.state.controller
    controller.relog(body.context, contact_id)
    return {
        "contact_id": contact_id,
        "state": str(controller.machine(body.context).state_of(contact_id)),
    }
