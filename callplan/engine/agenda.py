"""
Agenda Aggregator

Merges reminders, calendar events, the call-plan summary and manual items
into one checkable list. The merge order is fixed and is also what decides
the "next unchecked" item shown when the agenda is collapsed.
"""
import datetime as dt
from typing import Iterable, Mapping, Optional

from callplan.models.agenda import AgendaItem, CalendarEvent, ManualAgendaItem
from callplan.models.enums import AgendaKind
from callplan.models.reminder import Reminder
from callplan.utils.clock import local_now


def _unique(key: str, seen: dict[str, int]) -> str:
    count = seen.get(key, 0)
    seen[key] = count + 1
    return key if count == 0 else f"{key}#{count + 1}"


def plan_summary_label(plan_count: int) -> str:
    noun = "contact" if plan_count == 1 else "contacts"
    return f"{plan_count} {noun} in today's call plan"


def build_agenda(
    reminders: Iterable[Reminder],
    events: Iterable[CalendarEvent],
    plan_count: int,
    manual_items: Iterable[ManualAgendaItem],
    checked: Optional[Mapping[str, bool]] = None,
    plan_date: Optional[dt.date] = None,
) -> list[AgendaItem]:
    """
    Build today's agenda.

    Order: reminders (as given), calendar events (as given), one plan
    summary when plan_count > 0, then manual items in creation order.

    Args:
        reminders: Today's reminders
        events: Today's calendar events
        plan_count: Contacts on today's plan
        manual_items: Locally added items
        checked: Persisted checked flags keyed by item key
        plan_date: Date used in the plan summary key (defaults to today)

    Returns:
        Ordered agenda items with keys unique within the list
    """
    checked = checked or {}
    seen: dict[str, int] = {}
    items: list[AgendaItem] = []

    for reminder in reminders:
        label = reminder.contact_name or reminder.note or "Reminder"
        detail = reminder.note if reminder.contact_name else None
        items.append(AgendaItem(
            key=_unique(f"reminder:{reminder.id}", seen),
            kind=AgendaKind.REMINDER,
            label=label,
            detail=detail,
            time=reminder.fire_at,
        ))

    for event in events:
        items.append(AgendaItem(
            key=_unique(f"event:{event.id}", seen),
            kind=AgendaKind.CALENDAR_EVENT,
            label=event.title,
            detail=event.location,
            time=event.start,
        ))

    if plan_count > 0:
        plan_date = plan_date or local_now().date()
        items.append(AgendaItem(
            key=_unique(f"plan:{plan_date.isoformat()}", seen),
            kind=AgendaKind.PLAN_SUMMARY,
            label=plan_summary_label(plan_count),
        ))

    for manual in sorted(manual_items, key=lambda m: m.created_at):
        items.append(AgendaItem(
            key=_unique(f"manual:{manual.id}", seen),
            kind=AgendaKind.MANUAL_TASK,
            label=manual.label,
        ))

    for item in items:
        item.checked = bool(checked.get(item.key, False))

    return items


def next_unchecked(items: Iterable[AgendaItem]) -> Optional[AgendaItem]:
    """First unchecked item in merged order (not by time or priority)."""
    return next((item for item in items if not item.checked), None)
