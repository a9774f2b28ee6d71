"""
Repositories Layer
Client-local persistence for the call-plan dashboard.
"""
from .agenda_state import AgendaState, AgendaStateRepository

__all__ = [
    "AgendaState",
    "AgendaStateRepository",
]
