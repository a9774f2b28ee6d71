"""
Dashboard Controller

Wires the backend, today's work queue, one outcome state machine per
logging context, the reminder service, client-local agenda state and the
observable store. Views call into the controller; nothing else mutates
dashboard state.

Background polling (status + plan) runs on fixed intervals and is not
coordinated with operator actions.
"""
import asyncio
import datetime as dt
from typing import Awaitable, Callable, Iterable, Optional

from callplan.config import get_settings
from callplan.core.exceptions import ContactNotFoundError
from callplan.core.outcome_machine import (
    DEFAULT_POLICIES,
    LoggingContext,
    LoggingPolicy,
    LogResult,
    OutcomeStateMachine,
)
from callplan.core.store import DashboardStore
from callplan.core.work_queue import WorkQueue
from callplan.engine.agenda import build_agenda, next_unchecked
from callplan.engine.buckets import due_reminders as select_due
from callplan.engine.cadence import FollowUpSuggestion
from callplan.models.agenda import AgendaItem, AgendaToday, ManualAgendaItem
from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome, ReminderPriority
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.models.stats import CallStats
from callplan.repositories import AgendaStateRepository
from callplan.services.backend import CallPlanBackend
from callplan.services.reminders import ReminderService
from callplan.utils.clock import local_now
from callplan.utils.metrics import metrics
from callplan.utils.observability import logger


class DashboardController:
    """
    Usage:
        controller = DashboardController(HttpCallPlanBackend())
        await controller.load_today()

        result = await controller.log_outcome(
            LoggingContext.TODAYS_PLAN, contact_id, Outcome.LEFT_MESSAGE
        )
        if result.follow_up:
            await controller.commit_follow_up(result.follow_up, contact_id)

        poller = asyncio.create_task(controller.run_pollers())
    """

    def __init__(
        self,
        backend: CallPlanBackend,
        agenda_repo: Optional[AgendaStateRepository] = None,
        store: Optional[DashboardStore] = None,
        policies: Optional[dict[LoggingContext, LoggingPolicy]] = None,
        daily_target: Optional[int] = None,
        clock: Callable[[], dt.datetime] = local_now,
    ):
        settings = get_settings()
        self.backend = backend
        self.agenda_repo = agenda_repo or AgendaStateRepository()
        self.store = store or DashboardStore()
        self.daily_target = daily_target or settings.daily_target
        self.reminders = ReminderService(backend)
        self._clock = clock

        policies = {**DEFAULT_POLICIES, **(policies or {})}
        self.queue = WorkQueue(daily_target=self.daily_target)
        self.machines: dict[LoggingContext, OutcomeStateMachine] = {}
        for context in LoggingContext:
            queue = self.queue if context is LoggingContext.TODAYS_PLAN else WorkQueue()
            self.machines[context] = OutcomeStateMachine(
                queue, backend, context, policy=policies[context], clock=clock
            )

        self._plan_date: Optional[dt.date] = None
        self._agenda_source = AgendaToday()

    def now(self) -> dt.datetime:
        return self._clock()

    @property
    def today(self) -> dt.date:
        return self._clock().date()

    def machine(self, context: LoggingContext | str) -> OutcomeStateMachine:
        return self.machines[LoggingContext(context)]

    # ============================================
    # TODAY'S PLAN
    # ============================================

    async def load_today(self) -> WorkQueue:
        """Fetch today's plan and replace the queue (day start)."""
        contacts = await self.backend.fetch_today_plan()
        self.queue.load(contacts)
        self._plan_date = self.today
        self._publish_progress()
        logger.info(f"Loaded today's plan: {len(self.queue)} contacts")
        return self.queue

    async def top_up(self) -> int:
        """Append contacts the backend added to today's plan."""
        added = self.queue.top_up(await self.backend.fetch_today_plan())
        self._publish_progress()
        return added

    async def refresh_plan(self) -> None:
        """Plan poll: reload on a new day, otherwise merge server rows."""
        if self._plan_date != self.today:
            logger.info("New calendar day, resetting work queue")
            self.queue.reset()
            await self.load_today()
            return
        self.queue.merge_server_rows(await self.backend.fetch_today_plan())
        self._publish_progress()

    def _publish_progress(self) -> None:
        progress = self.queue.progress(self.daily_target)
        metrics.queue_remaining.set(progress.remaining)
        self.store.update(plan_progress=progress, last_refreshed=self._clock())

    # ============================================
    # OUTCOMES
    # ============================================

    def track(self, context: LoggingContext | str, contacts: Iterable[PlanContact]) -> int:
        """Register ad-hoc contacts (circle prospecting, events, search) for logging."""
        return self.machine(context).queue.top_up(contacts)

    async def log_outcome(
        self,
        context: LoggingContext | str,
        contact_id: str,
        outcome: Outcome | str,
        note: str = "",
    ) -> LogResult:
        result = await self.machine(context).log_outcome(contact_id, outcome, note)
        if LoggingContext(context) is LoggingContext.TODAYS_PLAN:
            self._publish_progress()
        return result

    async def retry(self, context: LoggingContext | str, contact_id: str) -> LogResult:
        result = await self.machine(context).retry(contact_id)
        if LoggingContext(context) is LoggingContext.TODAYS_PLAN:
            self._publish_progress()
        return result

    def relog(self, context: LoggingContext | str, contact_id: str) -> None:
        self.machine(context).relog(contact_id)
        if LoggingContext(context) is LoggingContext.TODAYS_PLAN:
            self._publish_progress()

    def find_contact(self, contact_id: str) -> Optional[PlanContact]:
        for machine in self.machines.values():
            contact = machine.queue.get(contact_id)
            if contact is not None:
                return contact
        return None

    # ============================================
    # REMINDERS
    # ============================================

    async def commit_follow_up(
        self,
        suggestion: FollowUpSuggestion,
        contact_id: Optional[str] = None,
        note: str = "",
        duration_minutes: Optional[int] = None,
        fire_at: Optional[dt.datetime] = None,
        priority: ReminderPriority = ReminderPriority.NORMAL,
        force: bool = False,
    ) -> Optional[Reminder]:
        contact = None
        if contact_id is not None:
            contact = self.find_contact(contact_id)
            if contact is None:
                raise ContactNotFoundError(f"Contact {contact_id} is not tracked")

        reminder = await self.reminders.commit_follow_up(
            suggestion,
            contact,
            note=note,
            duration_minutes=duration_minutes,
            fire_at=fire_at,
            priority=priority,
            force=force,
        )
        if reminder is not None:
            self._remember(reminder)
        return reminder

    async def create_reminder(self, data: ReminderDraft | dict) -> Reminder:
        reminder = await self.reminders.create(data)
        self._remember(reminder)
        return reminder

    def _remember(self, reminder: Reminder) -> None:
        upcoming = [r for r in self.store.upcoming_reminders if r.id != reminder.id]
        self.store.update(upcoming_reminders=[*upcoming, reminder])

    async def refresh_reminders(self) -> list[Reminder]:
        reminders = await self.backend.fetch_upcoming_reminders()
        self.store.update(upcoming_reminders=reminders, last_refreshed=self._clock())
        return reminders

    def due_reminders(self) -> list[Reminder]:
        """Open reminders whose time has come, oldest first."""
        return select_due(self.store.upcoming_reminders, self._clock())

    # ============================================
    # AGENDA
    # ============================================

    async def refresh_agenda(self) -> list[AgendaItem]:
        self._agenda_source = await self.backend.fetch_agenda_today()
        return self._publish_agenda()

    def agenda(self) -> list[AgendaItem]:
        return self.store.agenda

    def next_agenda_item(self) -> Optional[AgendaItem]:
        return next_unchecked(self.store.agenda)

    def toggle_agenda_item(self, key: str) -> bool:
        checked = self.agenda_repo.toggle(self.today, key)
        self._publish_agenda()
        return checked

    def add_manual_item(self, label: str) -> ManualAgendaItem:
        item = self.agenda_repo.add_manual_item(self.today, label)
        self._publish_agenda()
        return item

    def _publish_agenda(self) -> list[AgendaItem]:
        today = self.today
        items = build_agenda(
            self._agenda_source.reminders,
            self._agenda_source.events,
            self._agenda_source.plan_count,
            self.agenda_repo.manual_items(today),
            checked=self.agenda_repo.checked_for(today),
            plan_date=today,
        )
        self.store.update(agenda=items)
        return items

    # ============================================
    # STATS
    # ============================================

    async def refresh_stats(self) -> CallStats:
        stats = await self.backend.fetch_call_stats_today()
        self.store.update(call_stats=stats, last_refreshed=self._clock())
        return stats

    # ============================================
    # POLLERS
    # ============================================

    async def poll_status(self) -> None:
        await self.refresh_stats()
        await self.refresh_reminders()
        await self.refresh_agenda()

    async def run_pollers(self, interval: Optional[float] = None) -> None:
        """
        Run the status and plan pollers until cancelled.

        Args:
            interval: Seconds between polls (default from settings, 60)
        """
        interval = interval or get_settings().poll_interval_seconds
        await asyncio.gather(
            _poll_loop("status", self.poll_status, interval),
            _poll_loop("plan", self.refresh_plan, interval),
        )


async def _poll_loop(name: str, poll: Callable[[], Awaitable[None]], interval: float) -> None:
    logger.info(f"{name} poller started", extra={"poll_interval": interval})

    while True:
        try:
            await asyncio.sleep(interval)
            await poll()
        except asyncio.CancelledError:
            logger.info(f"{name} poller cancelled")
            raise
        except Exception as e:
            metrics.poll_failures.inc(poller=name)
            logger.error(f"{name} poller error: {e}")
