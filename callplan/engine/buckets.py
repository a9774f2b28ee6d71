"""
Time Bucketer

Groups reminders by when they fire, relative to "now" in local time.

Six-bucket chain (first match wins):
    no_date    fire_at missing (undated task)
    overdue    fire_at <  now
    today      fire_at <= end of today (23:59:59.999999)
    tomorrow   fire_at <= end of today + 24h
    this_week  fire_at <= end of today + 7 days
    later      anything else

The week strip is computed separately: every reminder is counted in the
calendar day of the current Monday-start week whose [start, start + 24h)
interval contains it.
"""
import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, Optional

from callplan.models.enums import ReminderBucket
from callplan.models.reminder import Reminder
from callplan.utils.clock import align, end_of_day, start_of_day

BUCKET_ORDER = (
    ReminderBucket.OVERDUE,
    ReminderBucket.TODAY,
    ReminderBucket.TOMORROW,
    ReminderBucket.THIS_WEEK,
    ReminderBucket.LATER,
    ReminderBucket.NO_DATE,
)

MAX_WEEK_DOTS = 3


@dataclass
class WeekDay:
    """One cell of the week strip."""
    date: dt.date
    count: int = 0
    is_today: bool = False
    reminders: list[Reminder] = field(default_factory=list)

    @property
    def dots(self) -> int:
        """Displayed dot count; `count` keeps the true number."""
        return min(self.count, MAX_WEEK_DOTS)


def bucket_for(fire_at: Optional[dt.datetime], now: dt.datetime) -> ReminderBucket:
    """Place a single timestamp into its bucket."""
    if fire_at is None:
        return ReminderBucket.NO_DATE

    fire_at = align(fire_at, now)
    if fire_at < now:
        return ReminderBucket.OVERDUE

    end_of_today = end_of_day(now)
    if fire_at <= end_of_today:
        return ReminderBucket.TODAY
    if fire_at <= end_of_today + dt.timedelta(hours=24):
        return ReminderBucket.TOMORROW
    if fire_at <= end_of_today + dt.timedelta(days=7):
        return ReminderBucket.THIS_WEEK
    return ReminderBucket.LATER


def group_reminders(
    reminders: Iterable[Reminder],
    now: dt.datetime,
) -> dict[ReminderBucket, list[Reminder]]:
    """
    Group reminders into buckets for the reminders view.

    Buckets come back in display order with empty ones omitted. Dated
    reminders are sorted by fire time; undated tasks keep their input order.
    """
    grouped: dict[ReminderBucket, list[Reminder]] = {b: [] for b in BUCKET_ORDER}
    for reminder in reminders:
        grouped[bucket_for(reminder.fire_at, now)].append(reminder)

    for bucket, items in grouped.items():
        if bucket is not ReminderBucket.NO_DATE:
            items.sort(key=lambda r: align(r.fire_at, now))

    return {bucket: items for bucket, items in grouped.items() if items}


def week_strip(reminders: Iterable[Reminder], now: dt.datetime) -> list[WeekDay]:
    """Per-day reminder counts for the Monday-start week containing now."""
    monday = start_of_day(now) - dt.timedelta(days=now.weekday())
    days = [
        WeekDay(date=(monday + dt.timedelta(days=i)).date(), is_today=(i == now.weekday()))
        for i in range(7)
    ]

    for reminder in reminders:
        if reminder.fire_at is None:
            continue
        fire_at = align(reminder.fire_at, now)
        for i, day in enumerate(days):
            day_start = monday + dt.timedelta(days=i)
            if day_start <= fire_at < day_start + dt.timedelta(hours=24):
                day.count += 1
                day.reminders.append(reminder)
                break

    return days


def due_reminders(reminders: Iterable[Reminder], now: dt.datetime) -> list[Reminder]:
    """Open, unsent, dated reminders whose time has come, oldest first."""
    due = [
        r for r in reminders
        if r.fire_at is not None
        and not r.sent
        and r.is_open
        and align(r.fire_at, now) <= now
    ]
    return sorted(due, key=lambda r: align(r.fire_at, now))


def time_ago(ts: Optional[dt.datetime], now: dt.datetime) -> str:
    """Compact relative time used by the status strip ("5m ago")."""
    if ts is None:
        return "-"
    seconds = int((now - align(ts, now)).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
