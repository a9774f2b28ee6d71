"""
Cadence Scheduler

Proposes the default follow-up for a call outcome. The scheduler only
proposes; the reminder is created when the operator commits it.

Rules:
    - left_message        -> 2 days later
    - connected           -> 1 day later
    - callback_requested  -> 1 day later
    - any other outcome   -> no follow-up suggested

The suggested time is always 09:00 local on the target date, whatever
time the call happened.

Usage:
    suggestion = suggest_follow_up(Outcome.LEFT_MESSAGE, local_now())
    if suggestion:
        draft = suggestion.to_draft(contact, note="")
"""
import datetime as dt
from dataclasses import dataclass
from typing import Optional

from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome, ReminderPriority
from callplan.models.reminder import (
    DEFAULT_DURATION_MINUTES,
    REMINDER_DURATIONS_MINUTES,
    ReminderDraft,
)

FOLLOW_UP_HOUR = 9

FOLLOW_UP_DAYS = {
    Outcome.CONNECTED: 1,
    Outcome.LEFT_MESSAGE: 2,
    Outcome.CALLBACK_REQUESTED: 1,
}


@dataclass(frozen=True)
class FollowUpSuggestion:
    """Default follow-up proposed after an outcome is logged."""
    outcome: Outcome
    days_offset: int
    fire_at: dt.datetime
    duration_minutes: int = DEFAULT_DURATION_MINUTES

    def to_draft(
        self,
        contact: Optional[PlanContact] = None,
        note: str = "",
        duration_minutes: Optional[int] = None,
        fire_at: Optional[dt.datetime] = None,
        priority: ReminderPriority = ReminderPriority.NORMAL,
    ) -> ReminderDraft:
        """
        Turn the proposal into a create-reminder payload.

        The operator may override time, duration and note; an empty note is
        synthesized from the outcome label.
        """
        return ReminderDraft(
            contact_id=contact.contact_id if contact else None,
            contact_name=contact.name if contact else None,
            contact_mobile=contact.mobile if contact else None,
            note=note.strip() or f"Follow up: {self.outcome.label}",
            fire_at=fire_at or self.fire_at,
            duration_minutes=duration_minutes or self.duration_minutes,
            priority=priority,
        )


def is_follow_up_outcome(outcome: Outcome | str) -> bool:
    """True for outcomes that trigger a follow-up suggestion."""
    try:
        return Outcome(outcome) in FOLLOW_UP_DAYS
    except ValueError:
        return False


def suggest_follow_up(
    outcome: Outcome | str,
    now: dt.datetime,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> Optional[FollowUpSuggestion]:
    """
    Propose the default follow-up timing for an outcome.

    Args:
        outcome: Logged call outcome
        now: Current local time (its tzinfo defines "local")
        duration_minutes: One of 15, 30, 60, 120

    Returns:
        FollowUpSuggestion, or None if the outcome has no follow-up
    """
    if not is_follow_up_outcome(outcome):
        return None
    if duration_minutes not in REMINDER_DURATIONS_MINUTES:
        raise ValueError(f"duration_minutes must be one of {REMINDER_DURATIONS_MINUTES}")

    outcome = Outcome(outcome)
    days = FOLLOW_UP_DAYS[outcome]
    target_date = now.date() + dt.timedelta(days=days)
    fire_at = dt.datetime.combine(target_date, dt.time(hour=FOLLOW_UP_HOUR), tzinfo=now.tzinfo)

    return FollowUpSuggestion(
        outcome=outcome,
        days_offset=days,
        fire_at=fire_at,
        duration_minutes=duration_minutes,
    )
