"""
Call-Plan Backend Interface

Abstract interface for the service that owns contacts, plans, reminders
and calendar data. The dashboard core only talks to the backend through
this contract.
"""

from abc import ABC, abstractmethod

from callplan.models.agenda import AgendaToday
from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.models.stats import CallStats


class CallPlanBackend(ABC):
    """
    Abstract call-plan backend.

    Implementations must provide:
    - Plan: today's contacts and outcome writes
    - Call log: outcomes logged outside today's plan
    - Reminders: create and list upcoming
    - Agenda / stats: read-only snapshots for the dashboard

    Every write raises ServiceError on a transport failure or a not-ok
    response. Nothing is retried automatically.
    """

    @abstractmethod
    async def fetch_today_plan(self) -> list[PlanContact]:
        """
        Get today's planned contacts in plan order.

        Returns:
            Contacts, some possibly already called
        """
        pass

    @abstractmethod
    async def patch_outcome(self, contact_id: str, outcome: Outcome, note: str) -> None:
        """
        Record an outcome against today's plan row.

        Args:
            contact_id: Plan contact
            outcome: Call outcome
            note: Formatted call note
        """
        pass

    @abstractmethod
    async def log_call(self, contact_id: str, outcome: Outcome, note: str) -> None:
        """
        Log a call made outside today's plan (circle prospecting, events, search).

        Args:
            contact_id: Contact called
            outcome: Call outcome
            note: Formatted call note
        """
        pass

    @abstractmethod
    async def create_reminder(self, draft: ReminderDraft) -> Reminder:
        """
        Persist a reminder.

        Args:
            draft: Validated create request

        Returns:
            The stored reminder
        """
        pass

    @abstractmethod
    async def fetch_upcoming_reminders(self) -> list[Reminder]:
        pass

    @abstractmethod
    async def fetch_agenda_today(self) -> AgendaToday:
        pass

    @abstractmethod
    async def fetch_call_stats_today(self) -> CallStats:
        pass
