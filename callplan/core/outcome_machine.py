"""
Outcome State Machine

Per-contact logging lifecycle:

    UNCALLED --log_outcome--> LOGGING --success--> LOGGED(outcome)
                                  |                    |
                                  +--failure (stays,   +--relog--> UNCALLED
                                     retry() repeats)

Whether the contact is marked before or after the backend confirms is a
property of the logging context (LoggingPolicy), not of the code path:

    todays_plan         confirmed   patch_outcome   advances the queue
    circle_prospecting  optimistic  log_call
    market_event        confirmed   log_call
    search              confirmed   log_call

Optimistic marks are never rolled back on failure.
"""
import datetime as dt
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Optional

from callplan.core.exceptions import ContactNotFoundError, InvalidOutcomeError, ServiceError
from callplan.core.work_queue import WorkQueue
from callplan.engine.cadence import FollowUpSuggestion, suggest_follow_up
from callplan.models.enums import Outcome
from callplan.services.backend import CallPlanBackend
from callplan.utils.clock import local_now
from callplan.utils.metrics import metrics
from callplan.utils.observability import log_business_event, logger


class LoggingContext(StrEnum):
    TODAYS_PLAN = "todays_plan"
    CIRCLE_PROSPECTING = "circle_prospecting"
    MARKET_EVENT = "market_event"
    SEARCH = "search"


class ContactState(StrEnum):
    UNCALLED = "uncalled"
    LOGGING = "logging"
    LOGGED = "logged"


class LogEndpoint(StrEnum):
    PATCH_OUTCOME = "patch_outcome"
    LOG_CALL = "log_call"


@dataclass(frozen=True)
class LoggingPolicy:
    """How outcomes are written for one logging context."""
    label: str
    optimistic: bool = False
    endpoint: LogEndpoint = LogEndpoint.LOG_CALL
    advances_queue: bool = False


DEFAULT_POLICIES: dict[LoggingContext, LoggingPolicy] = {
    LoggingContext.TODAYS_PLAN: LoggingPolicy(
        label="Call Plan",
        endpoint=LogEndpoint.PATCH_OUTCOME,
        advances_queue=True,
    ),
    LoggingContext.CIRCLE_PROSPECTING: LoggingPolicy(
        label="Circle Prospecting",
        optimistic=True,
    ),
    LoggingContext.MARKET_EVENT: LoggingPolicy(label="Market Event"),
    LoggingContext.SEARCH: LoggingPolicy(label="Search"),
}


@dataclass
class PendingAttempt:
    """An outcome write that has been sent but not confirmed."""
    outcome: Outcome
    note: str
    uncalled_before: list = field(default_factory=list)
    error: Optional[str] = None
    in_flight: bool = False


@dataclass
class LogResult:
    """What the operator sees after a log attempt."""
    contact_id: str
    outcome: Outcome
    success: bool
    state: ContactState
    note: str
    active_contact_id: Optional[str] = None
    follow_up: Optional[FollowUpSuggestion] = None
    error: Optional[str] = None
    retryable: bool = False


class OutcomeStateMachine:
    """
    Logs call outcomes for the contacts of one work queue.

    Usage:
        machine = OutcomeStateMachine(queue, backend, LoggingContext.TODAYS_PLAN)

        result = await machine.log_outcome(contact_id, Outcome.LEFT_MESSAGE, "wants a price update")
        if not result.success:
            result = await machine.retry(contact_id)
        if result.follow_up:
            ...  # offer the follow-up reminder form
    """

    def __init__(
        self,
        queue: WorkQueue,
        backend: CallPlanBackend,
        context: LoggingContext = LoggingContext.TODAYS_PLAN,
        policy: Optional[LoggingPolicy] = None,
        clock: Callable[[], dt.datetime] = local_now,
    ):
        self.queue = queue
        self.backend = backend
        self.context = LoggingContext(context)
        self.policy = policy or DEFAULT_POLICIES[self.context]
        self._clock = clock
        self._pending: dict[str, PendingAttempt] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state_of(self, contact_id: str) -> ContactState:
        if contact_id in self._pending:
            return ContactState.LOGGING
        contact = self.queue.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} is not tracked for {self.context}")
        return ContactState.LOGGED if contact.is_called else ContactState.UNCALLED

    def pending(self, contact_id: str) -> Optional[PendingAttempt]:
        return self._pending.get(contact_id)

    def build_note(self, contact_id: str, outcome: Outcome, note: str = "") -> str:
        """'[Context] address | Outcome' with ': note' appended when given."""
        contact = self.queue.get(contact_id)
        address = contact.display_address if contact else ""
        text = f"[{self.policy.label}] {address} | {Outcome(outcome).label}"
        note = (note or "").strip()
        return f"{text}: {note}" if note else text

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def log_outcome(self, contact_id: str, outcome: Outcome | str, note: str = "") -> LogResult:
        """
        Log an outcome for a contact.

        Raises:
            ContactNotFoundError: Contact is not in this machine's queue
            InvalidOutcomeError: Outcome is not a known value

        Service failures are not raised: they come back as a failed,
        retryable LogResult and the contact stays LOGGING.
        """
        try:
            outcome = Outcome(outcome)
        except ValueError as e:
            raise InvalidOutcomeError(f"Unknown outcome: {outcome!r}") from e

        if contact_id not in self.queue:
            raise ContactNotFoundError(f"Contact {contact_id} is not tracked for {self.context}")

        attempt = PendingAttempt(
            outcome=outcome,
            note=self.build_note(contact_id, outcome, note),
            uncalled_before=self.queue.uncalled,
        )
        return await self._attempt(contact_id, attempt)

    async def retry(self, contact_id: str) -> LogResult:
        """Re-issue the pending attempt left behind by a failure."""
        attempt = self._pending.get(contact_id)
        if attempt is None:
            raise ContactNotFoundError(f"No failed attempt to retry for contact {contact_id}")
        logger.info(f"Retrying outcome for {contact_id} ({self.context})")
        return await self._attempt(contact_id, attempt)

    def relog(self, contact_id: str) -> ContactState:
        """Return a logged (or failed) contact to uncalled."""
        if contact_id not in self.queue:
            raise ContactNotFoundError(f"Contact {contact_id} is not tracked for {self.context}")

        self._pending.pop(contact_id, None)
        previous = self.queue.get(contact_id).outcome
        self.queue.clear_outcome(contact_id)
        log_business_event(
            "outcome_relogged",
            contact_id,
            context=str(self.context),
            previous_outcome=str(previous) if previous else None,
        )
        return ContactState.UNCALLED

    def _settle(self, contact_id: str, attempt: PendingAttempt) -> None:
        # Overlapping attempts: the last response to resolve decides the state,
        # so a success leaves a newer attempt that is still in flight alone.
        current = self._pending.get(contact_id)
        if current is attempt or (current is not None and not current.in_flight):
            del self._pending[contact_id]

    async def _attempt(self, contact_id: str, attempt: PendingAttempt) -> LogResult:
        self._pending[contact_id] = attempt
        attempt.error = None
        attempt.in_flight = True
        now = self._clock()

        if self.policy.optimistic:
            self.queue.apply_outcome(contact_id, attempt.outcome, now)

        try:
            if self.policy.endpoint is LogEndpoint.PATCH_OUTCOME:
                await self.backend.patch_outcome(contact_id, attempt.outcome, attempt.note)
            else:
                await self.backend.log_call(contact_id, attempt.outcome, attempt.note)
        except ServiceError as e:
            attempt.in_flight = False
            attempt.error = e.message
            self._pending[contact_id] = attempt
            metrics.outcome_failures.inc(context=str(self.context))
            logger.bind(
                contact_id=contact_id,
                context=str(self.context),
                outcome=str(attempt.outcome),
                status_code=e.status_code,
            ).warning(f"Outcome logging failed for {contact_id}: {e}")
            return LogResult(
                contact_id=contact_id,
                outcome=attempt.outcome,
                success=False,
                state=ContactState.LOGGING,
                note=attempt.note,
                active_contact_id=self.queue.active_contact_id,
                error=f"Could not log call: {e.message}. Try again.",
                retryable=e.retryable,
            )

        attempt.in_flight = False
        self._settle(contact_id, attempt)
        if not self.policy.optimistic:
            self.queue.apply_outcome(contact_id, attempt.outcome, now)

        if self.policy.advances_queue:
            self.queue.advance_after(contact_id, attempt.uncalled_before)
            metrics.queue_remaining.set(len(self.queue.uncalled))

        metrics.outcomes_logged.inc(outcome=str(attempt.outcome), context=str(self.context))
        log_business_event(
            "outcome_logged",
            contact_id,
            context=str(self.context),
            outcome=str(attempt.outcome),
            optimistic=self.policy.optimistic,
        )

        return LogResult(
            contact_id=contact_id,
            outcome=attempt.outcome,
            success=True,
            state=ContactState.LOGGED,
            note=attempt.note,
            active_contact_id=self.queue.active_contact_id,
            follow_up=suggest_follow_up(attempt.outcome, now),
        )
