from callplan.services.backend import CallPlanBackend
from callplan.services.http_backend import HttpCallPlanBackend
from callplan.services.memory_backend import InMemoryCallPlanBackend
from callplan.services.reminders import ReminderService

__all__ = [
    "CallPlanBackend",
    "HttpCallPlanBackend",
    "InMemoryCallPlanBackend",
    "ReminderService",
]
