import datetime as dt
from typing import Optional
from pydantic import Field, field_validator
from callplan.models.base import CallPlanModel, ensure_aware
from callplan.models.enums import AgendaKind
from callplan.models.reminder import Reminder


class CalendarEvent(CallPlanModel):
    """An event read from the operator's calendar. Never mutated here."""
    id: str
    title: str
    start: Optional[dt.datetime] = None
    end: Optional[dt.datetime] = None
    location: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return ensure_aware(value)


class ManualAgendaItem(CallPlanModel):
    """Ad-hoc item typed into the agenda; stored on this client only."""
    id: str
    label: str = Field(..., min_length=1)
    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))


class AgendaItem(CallPlanModel):
    """
    One row of the unified daily agenda.

    `checked` belongs to the agenda, not to the source entity: checking a
    calendar event does not touch the calendar.
    """
    key: str
    kind: AgendaKind
    label: str
    detail: Optional[str] = None
    time: Optional[dt.datetime] = None
    checked: bool = False


class AgendaToday(CallPlanModel):
    """Backend snapshot used to build today's agenda."""
    reminders: list[Reminder] = Field(default_factory=list)
    events: list[CalendarEvent] = Field(default_factory=list)
    plan_count: int = 0
