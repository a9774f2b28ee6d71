import datetime as dt
from typing import Optional
from pydantic import Field, field_validator, model_validator
from callplan.models.base import CallPlanModel, TimestampedModel, ensure_aware
from callplan.models.enums import ReminderPriority

# Closed set offered by the follow-up form
REMINDER_DURATIONS_MINUTES = (15, 30, 60, 120)
DEFAULT_DURATION_MINUTES = 30


class ReminderDraft(CallPlanModel):
    """
    Create-reminder request payload.

    Validated locally so a bad draft never reaches the backend.
    """
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_mobile: Optional[str] = None
    note: str = Field(..., min_length=1)
    fire_at: Optional[dt.datetime] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    priority: ReminderPriority = ReminderPriority.NORMAL
    is_task: bool = False

    @field_validator("fire_at")
    @classmethod
    def _aware_fire_at(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return ensure_aware(value)

    @field_validator("duration_minutes")
    @classmethod
    def _known_duration(cls, value: int) -> int:
        if value not in REMINDER_DURATIONS_MINUTES:
            raise ValueError(f"duration_minutes must be one of {REMINDER_DURATIONS_MINUTES}")
        return value

    @model_validator(mode="after")
    def _dated_unless_task(self) -> "ReminderDraft":
        if self.fire_at is None and not self.is_task:
            raise ValueError("fire_at is required for reminders that are not tasks")
        return self


class Reminder(TimestampedModel):
    """
    A persisted reminder or task.

    contact_id is a weak reference used for lookup only.
    """
    id: str
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_mobile: Optional[str] = None
    note: str = ""
    fire_at: Optional[dt.datetime] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    priority: ReminderPriority = ReminderPriority.NORMAL
    is_task: bool = False

    sent: bool = False
    completed_at: Optional[dt.datetime] = None

    @field_validator("id", "contact_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        return None if value is None else str(value)

    @field_validator("fire_at", "completed_at", "created_at")
    @classmethod
    def _aware_timestamps(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return ensure_aware(value)

    @model_validator(mode="after")
    def _dated_unless_task(self) -> "Reminder":
        if self.fire_at is None and not self.is_task:
            raise ValueError("fire_at is required for reminders that are not tasks")
        return self

    @property
    def is_open(self) -> bool:
        return self.completed_at is None
