"""
Dashboard API request bodies.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from callplan.core.outcome_machine import LoggingContext
from callplan.models.enums import Outcome, ReminderPriority
from callplan.models.reminder import DEFAULT_DURATION_MINUTES


class LogOutcomeRequest(BaseModel):
    outcome: str
    note: str = ""
    context: LoggingContext = LoggingContext.TODAYS_PLAN


class ContextRequest(BaseModel):
    context: LoggingContext = LoggingContext.TODAYS_PLAN


class CreateReminderRequest(BaseModel):
    """
    Hand-made reminder, or the follow-up proposed after an outcome.

    When `follow_up_outcome` is set the follow-up cadence fills in fire_at
    and the note unless they are given explicitly.
    """
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_mobile: Optional[str] = None
    note: str = ""
    fire_at: Optional[dt.datetime] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    priority: ReminderPriority = ReminderPriority.NORMAL
    is_task: bool = False
    follow_up_outcome: Optional[Outcome] = None
    force: bool = False


class ManualItemRequest(BaseModel):
    label: str = Field(..., min_length=1)
