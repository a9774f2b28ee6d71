"""
Agenda State Repository
Client-local persistence for agenda checked flags and manual items.

Stored as one JSON document; nothing here is sent to the backend.
Checked flags are keyed "<date>:<item key>" so yesterday's ticks do not
carry over.
"""
import datetime as dt
import uuid
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError

from ..config import get_settings
from ..models.agenda import ManualAgendaItem
from ..models.base import CallPlanModel
from ..utils.observability import logger


class AgendaState(CallPlanModel):
    checked: dict[str, bool] = Field(default_factory=dict)
    manual_items: dict[str, list[ManualAgendaItem]] = Field(default_factory=dict)


class AgendaStateRepository:
    """
    Usage:
        repo = AgendaStateRepository()
        repo.toggle(today, "plan:2026-03-02")
        checked = repo.checked_for(today)
    """

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path or get_settings().agenda_state_path)
        self._state = self._load()

    def _load(self) -> AgendaState:
        if not self.path.exists():
            return AgendaState()
        try:
            return AgendaState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable agenda state at {self.path}: {e}")
            return AgendaState()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(self._state.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(self.path)

    @staticmethod
    def _key(day: dt.date, item_key: str) -> str:
        return f"{day.isoformat()}:{item_key}"

    # ============================================
    # CHECKED FLAGS
    # ============================================

    def checked_for(self, day: dt.date) -> dict[str, bool]:
        """Checked flags for one day, keyed by agenda item key."""
        prefix = f"{day.isoformat()}:"
        return {
            key[len(prefix):]: value
            for key, value in self._state.checked.items()
            if key.startswith(prefix)
        }

    def set_checked(self, day: dt.date, item_key: str, checked: bool) -> None:
        self._state.checked[self._key(day, item_key)] = checked
        self._save()

    def toggle(self, day: dt.date, item_key: str) -> bool:
        """Flip an item's checked flag. Returns the new value."""
        value = not self._state.checked.get(self._key(day, item_key), False)
        self.set_checked(day, item_key, value)
        logger.debug(f"Agenda item {item_key} checked={value}")
        return value

    # ============================================
    # MANUAL ITEMS
    # ============================================

    def manual_items(self, day: dt.date) -> list[ManualAgendaItem]:
        return list(self._state.manual_items.get(day.isoformat(), []))

    def add_manual_item(self, day: dt.date, label: str) -> ManualAgendaItem:
        item = ManualAgendaItem(id=uuid.uuid4().hex[:12], label=label)
        self._state.manual_items.setdefault(day.isoformat(), []).append(item)
        self._save()
        logger.debug(f"Added manual agenda item {item.id}")
        return item

    def remove_manual_item(self, day: dt.date, item_id: str) -> bool:
        items = self._state.manual_items.get(day.isoformat(), [])
        kept = [i for i in items if i.id != item_id]
        if len(kept) == len(items):
            return False
        self._state.manual_items[day.isoformat()] = kept
        self._state.checked.pop(self._key(day, f"manual:{item_id}"), None)
        self._save()
        return True
