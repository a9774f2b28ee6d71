from enum import StrEnum


class Outcome(StrEnum):
    CONNECTED = "connected"
    LEFT_MESSAGE = "left_message"
    NO_ANSWER = "no_answer"
    NOT_INTERESTED = "not_interested"
    CALLBACK_REQUESTED = "callback_requested"
    APPRAISAL_BOOKED = "appraisal_booked"

    @property
    def label(self) -> str:
        return OUTCOME_LABELS[self]


OUTCOME_LABELS = {
    Outcome.CONNECTED: "Connected",
    Outcome.LEFT_MESSAGE: "Left Message",
    Outcome.NO_ANSWER: "No Answer",
    Outcome.NOT_INTERESTED: "Not Interested",
    Outcome.CALLBACK_REQUESTED: "Callback",
    Outcome.APPRAISAL_BOOKED: "Appraisal Booked",
}


class Tier(StrEnum):
    HIGH = "high"
    MED = "med"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordering helper: low < med < high."""
        return {Tier.LOW: 0, Tier.MED: 1, Tier.HIGH: 2}[self]


TIER_LABELS = {
    Tier.HIGH: "Prime Targets",
    Tier.MED: "Warm Leads",
    Tier.LOW: "Cold Calls",
}


class ReminderPriority(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class ReminderBucket(StrEnum):
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    LATER = "later"
    NO_DATE = "no_date"


class AgendaKind(StrEnum):
    REMINDER = "reminder"
    CALENDAR_EVENT = "calendar_event"
    PLAN_SUMMARY = "plan_summary"
    MANUAL_TASK = "manual_task"
