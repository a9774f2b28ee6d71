"""
Local-time helpers.

Business rules (09:00 follow-ups, day buckets, Monday weeks) are expressed
in the sales office's wall-clock time, configured by LOCAL_TIMEZONE.
"""
import datetime as dt
from zoneinfo import ZoneInfo
from callplan.config import get_settings


def local_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().local_timezone)


def local_now() -> dt.datetime:
    """Current time in the configured local zone."""
    return dt.datetime.now(local_zone())


def align(ts: dt.datetime, now: dt.datetime) -> dt.datetime:
    """
    Express ts in now's zone so calendar-day arithmetic agrees.

    A naive value is taken to already be in the other value's zone.
    """
    if now.tzinfo is None:
        return ts.replace(tzinfo=None) if ts.tzinfo is None else ts.astimezone(local_zone()).replace(tzinfo=None)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=now.tzinfo)
    return ts.astimezone(now.tzinfo)


def start_of_day(now: dt.datetime) -> dt.datetime:
    return dt.datetime.combine(now.date(), dt.time.min, tzinfo=now.tzinfo)


def end_of_day(now: dt.datetime) -> dt.datetime:
    """23:59:59.999999 on now's local date."""
    return dt.datetime.combine(now.date(), dt.time.max, tzinfo=now.tzinfo)
