"""
Dashboard Store

Observable holder for the data shown in the status strip and side panels.
Writers call update(); views subscribe and are notified synchronously.
"""
import datetime as dt
from dataclasses import dataclass, field, fields, replace
from typing import Callable, Optional

from callplan.models.agenda import AgendaItem
from callplan.models.reminder import Reminder
from callplan.models.stats import CallStats, PlanProgress
from callplan.utils.observability import logger


@dataclass(frozen=True)
class DashboardSnapshot:
    last_refreshed: Optional[dt.datetime] = None
    plan_progress: PlanProgress = field(default_factory=PlanProgress)
    call_stats: CallStats = field(default_factory=CallStats)
    upcoming_reminders: list[Reminder] = field(default_factory=list)
    agenda: list[AgendaItem] = field(default_factory=list)


Subscriber = Callable[[DashboardSnapshot], None]


class DashboardStore:
    """
    Usage:
        store = DashboardStore()
        unsubscribe = store.subscribe(lambda snap: render(snap))
        store.update(call_stats=stats, last_refreshed=now)
        unsubscribe()
    """

    _FIELDS = frozenset(f.name for f in fields(DashboardSnapshot))

    def __init__(self):
        self._snapshot = DashboardSnapshot()
        self._subscribers: list[Subscriber] = []

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    def __getattr__(self, name: str):
        if name in self._FIELDS:
            return getattr(self._snapshot, name)
        raise AttributeError(name)

    def update(self, **changes) -> DashboardSnapshot:
        unknown = set(changes) - self._FIELDS
        if unknown:
            raise TypeError(f"Unknown dashboard fields: {sorted(unknown)}")

        self._snapshot = replace(self._snapshot, **changes)
        for callback in list(self._subscribers):
            try:
                callback(self._snapshot)
            except Exception as e:
                logger.exception(f"Dashboard subscriber failed: {e}")
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
