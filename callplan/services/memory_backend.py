"""
In-Memory Call-Plan Backend

Dictionary-backed backend for testing and local demos.
Data is lost on restart.
"""

import datetime as dt
import uuid
from typing import Iterable, Optional

from callplan.core.exceptions import ServiceError
from callplan.models.agenda import AgendaToday, CalendarEvent
from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.models.stats import CallStats
from callplan.services.backend import CallPlanBackend


class InMemoryCallPlanBackend(CallPlanBackend):
    """
    In-memory backend implementation.

    Suitable for:
    - Testing (including failure injection via fail_next)
    - Demos without a running backend

    Every call is appended to `calls` as (operation, args) so tests can
    assert on what was sent.
    """

    def __init__(
        self,
        plan: Optional[Iterable[PlanContact]] = None,
        reminders: Optional[Iterable[Reminder]] = None,
        events: Optional[Iterable[CalendarEvent]] = None,
    ):
        self._plan: dict[str, PlanContact] = {c.contact_id: c for c in plan or []}
        self._reminders: dict[str, Reminder] = {r.id: r for r in reminders or []}
        self._events: list[CalendarEvent] = list(events or [])
        self._call_log: list[dict] = []
        self._failures: dict[str, int] = {}
        self._failure_status: Optional[int] = 503
        self.calls: list[tuple[str, tuple]] = []

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def fail_next(self, operation: str, times: int = 1, status_code: Optional[int] = 503) -> None:
        """Make the next `times` calls of `operation` raise ServiceError."""
        self._failures[operation] = self._failures.get(operation, 0) + times
        self._failure_status = status_code

    def add_to_plan(self, *contacts: PlanContact) -> None:
        for contact in contacts:
            self._plan[contact.contact_id] = contact

    def add_event(self, event: CalendarEvent) -> None:
        self._events.append(event)

    @property
    def call_log(self) -> list[dict]:
        return list(self._call_log)

    @property
    def reminders(self) -> list[Reminder]:
        return list(self._reminders.values())

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        remaining = self._failures.get(operation, 0)
        if remaining:
            self._failures[operation] = remaining - 1
            raise ServiceError(operation, "injected failure", status_code=self._failure_status)

    # ------------------------------------------------------------------
    # CallPlanBackend
    # ------------------------------------------------------------------

    async def fetch_today_plan(self) -> list[PlanContact]:
        self._record("fetch_today_plan")
        return [c.model_copy(deep=True) for c in self._plan.values()]

    async def patch_outcome(self, contact_id: str, outcome: Outcome, note: str) -> None:
        self._record("patch_outcome", contact_id, outcome, note)
        contact = self._plan.get(contact_id)
        if contact is None:
            raise ServiceError("patch_outcome", f"contact {contact_id} is not on today's plan", status_code=404)
        contact.mark_called(outcome)
        contact.notes = note
        self._call_log.append({"contact_id": contact_id, "outcome": outcome, "note": note, "source": "plan"})

    async def log_call(self, contact_id: str, outcome: Outcome, note: str) -> None:
        self._record("log_call", contact_id, outcome, note)
        self._call_log.append({"contact_id": contact_id, "outcome": outcome, "note": note, "source": "call_log"})

    async def create_reminder(self, draft: ReminderDraft) -> Reminder:
        self._record("create_reminder", draft)
        reminder = Reminder(
            id=str(uuid.uuid4()),
            created_at=dt.datetime.now(dt.UTC),
            **draft.to_payload(),
        )
        self._reminders[reminder.id] = reminder
        return reminder

    async def fetch_upcoming_reminders(self) -> list[Reminder]:
        self._record("fetch_upcoming_reminders")
        return [r for r in self._reminders.values() if r.is_open]

    async def fetch_agenda_today(self) -> AgendaToday:
        self._record("fetch_agenda_today")
        today = dt.datetime.now(dt.UTC).date()
        todays = [
            r for r in self._reminders.values()
            if r.is_open and r.fire_at is not None and r.fire_at.date() == today
        ]
        return AgendaToday(
            reminders=todays,
            events=list(self._events),
            plan_count=sum(1 for c in self._plan.values() if not c.is_called),
        )

    async def fetch_call_stats_today(self) -> CallStats:
        self._record("fetch_call_stats_today")
        outcomes = [entry["outcome"] for entry in self._call_log]
        return CallStats(
            calls=len(outcomes),
            connected=outcomes.count(Outcome.CONNECTED),
            left_message=outcomes.count(Outcome.LEFT_MESSAGE),
            no_answer=outcomes.count(Outcome.NO_ANSWER),
        )
