"""
Reminder Endpoints

Upcoming reminders grouped by time bucket, the week strip, and creation
of hand-made reminders and outcome follow-ups.
"""
from fastapi import APIRouter, Request

from callplan.api.models.requests import CreateReminderRequest
from callplan.core.exceptions import ReminderValidationError
from callplan.core.dashboard import DashboardController
from callplan.engine.buckets import group_reminders, week_strip
from callplan.engine.cadence import suggest_follow_up
from callplan.models.reminder import Reminder
from callplan.services.reminders import default_fire_at

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def _serialize(reminder: Reminder) -> dict:
    return reminder.model_dump(mode="json")


@router.get("")
async def list_reminders(request: Request):
    """Due reminders, upcoming reminders in display buckets, and this week's strip."""
    controller: DashboardController = request.app.state.controller
    now = controller.now()
    reminders = controller.store.upcoming_reminders

    return {
        "due": [_serialize(r) for r in controller.due_reminders()],
        "buckets": [
            {"bucket": str(bucket), "reminders": [_serialize(r) for r in items]}
            for bucket, items in group_reminders(reminders, now).items()
        ],
        "week": [
            {
                "date": day.date.isoformat(),
                "count": day.count,
                "dots": day.dots,
                "is_today": day.is_today,
            }
            for day in week_strip(reminders, now)
        ],
    }


@router.post("", status_code=201)
async def create_reminder(body: CreateReminderRequest, request: Request):
    """
    Create a reminder.

    With `follow_up_outcome`, the default follow-up is proposed from the
    outcome and committed (skipped when the contact already has an open
    reminder, unless `force`). A hand-made reminder without a time defaults
    to tomorrow at 09:00.
    """
    controller: DashboardController = request.app.state.controller

    if body.follow_up_outcome is not None:
        try:
            suggestion = suggest_follow_up(body.follow_up_outcome, controller.now(), body.duration_minutes)
        except ValueError as e:
            raise ReminderValidationError(str(e)) from e
        if suggestion is not None:
            reminder = await controller.commit_follow_up(
                suggestion,
                body.contact_id,
                note=body.note,
                fire_at=body.fire_at,
                priority=body.priority,
                force=body.force,
            )
            if reminder is None:
                return {"created": False, "reason": "open reminder exists", "reminder": None}
            return {"created": True, "reminder": _serialize(reminder)}

    draft = body.model_dump(exclude={"follow_up_outcome", "force"})
    if draft["fire_at"] is None and not draft["is_task"]:
        draft["fire_at"] = default_fire_at(controller.now())
    reminder = await controller.create_reminder(draft)
    return {"created": True, "reminder": _serialize(reminder)}
