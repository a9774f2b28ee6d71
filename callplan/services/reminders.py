"""
Reminder Service

Validates and commits reminders, including the follow-up proposed after
a call outcome. The cadence scheduler only proposes; this service is the
single place a reminder is actually created.
"""

import datetime as dt
from typing import Any, Optional

import pydantic

from callplan.core.exceptions import ReminderValidationError
from callplan.engine.cadence import FollowUpSuggestion
from callplan.models.contact import PlanContact
from callplan.models.enums import ReminderPriority
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.services.backend import CallPlanBackend
from callplan.utils.metrics import metrics
from callplan.utils.observability import log_business_event, logger


def _validation_message(error: pydantic.ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{field}: {item['msg']}" if field else item["msg"])
    return "; ".join(parts)


def default_fire_at(now: dt.datetime) -> dt.datetime:
    """Default for a hand-made reminder: tomorrow at 09:00 local."""
    tomorrow = now.date() + dt.timedelta(days=1)
    return dt.datetime.combine(tomorrow, dt.time(hour=9), tzinfo=now.tzinfo)


class ReminderService:
    """
    Coordinates reminder creation.

    Usage:
        service = ReminderService(backend)

        # After logging "left_message"
        reminder = await service.commit_follow_up(suggestion, contact)

        # Hand-made reminder
        reminder = await service.create({"note": "Call back", "fire_at": ...})
    """

    def __init__(self, backend: CallPlanBackend):
        self.backend = backend

    @staticmethod
    def build_draft(data: ReminderDraft | dict[str, Any]) -> ReminderDraft:
        """
        Validate a create request locally.

        Raises:
            ReminderValidationError: If a required field is missing or a value is bad
        """
        if isinstance(data, ReminderDraft):
            return data
        try:
            return ReminderDraft.model_validate(data)
        except pydantic.ValidationError as e:
            raise ReminderValidationError(_validation_message(e)) from e

    async def has_open_reminder(self, contact_id: Optional[str]) -> bool:
        """True if the contact already has a reminder that is not completed."""
        if not contact_id:
            return False
        upcoming = await self.backend.fetch_upcoming_reminders()
        return any(r.contact_id == contact_id and r.is_open for r in upcoming)

    async def create(self, data: ReminderDraft | dict[str, Any]) -> Reminder:
        """
        Validate and persist a reminder.

        Raises:
            ReminderValidationError: Before any request is sent
            ServiceError: If the backend call fails
        """
        draft = self.build_draft(data)
        reminder = await self.backend.create_reminder(draft)
        metrics.reminders_created.inc()
        log_business_event(
            "reminder_created",
            reminder.contact_id,
            reminder_id=reminder.id,
            fire_at=reminder.fire_at.isoformat() if reminder.fire_at else None,
            is_task=reminder.is_task,
        )
        return reminder

    async def commit_follow_up(
        self,
        suggestion: FollowUpSuggestion,
        contact: Optional[PlanContact] = None,
        note: str = "",
        duration_minutes: Optional[int] = None,
        fire_at: Optional[dt.datetime] = None,
        priority: ReminderPriority = ReminderPriority.NORMAL,
        force: bool = False,
    ) -> Optional[Reminder]:
        """
        Commit the proposed follow-up, with any operator overrides.

        Args:
            suggestion: Proposal from suggest_follow_up
            contact: Contact the follow-up is for
            note: Free text; synthesized from the outcome when empty
            duration_minutes: Override (15, 30, 60 or 120)
            fire_at: Override of the proposed 09:00 time
            priority: Reminder priority
            force: Create even if the contact already has an open reminder

        Returns:
            The created reminder, or None when skipped as a duplicate
        """
        try:
            draft = suggestion.to_draft(
                contact,
                note=note,
                duration_minutes=duration_minutes,
                fire_at=fire_at,
                priority=priority,
            )
        except pydantic.ValidationError as e:
            raise ReminderValidationError(_validation_message(e)) from e

        if not force and await self.has_open_reminder(draft.contact_id):
            logger.info(f"Skipping follow-up for {draft.contact_id}: open reminder already exists")
            return None

        reminder = await self.create(draft)
        log_business_event(
            "follow_up_committed",
            reminder.contact_id,
            outcome=str(suggestion.outcome),
            days_offset=suggestion.days_offset,
        )
        return reminder
