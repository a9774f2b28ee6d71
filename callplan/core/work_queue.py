"""
Work Queue

Today's planned contacts in insertion order with an "active" cursor.
The uncalled / called split is a predicate over each contact's
`called_at`, not two physical lists.

Lifecycle:
    load()    day start, replaces the plan
    top_up()  appends fetched contacts (capped at the daily target)
    reset()   next calendar day

Mutations are applied from the single event loop; the last write for a
contact id wins.
"""
import datetime as dt
from typing import Iterable, Iterator, Optional

from callplan.engine.tiers import group_by_tier
from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome, Tier
from callplan.models.stats import PlanProgress
from callplan.utils.observability import logger


class WorkQueue:
    """
    Ordered collection of today's contacts with an auto-advancing cursor.

    Usage:
        queue = WorkQueue()
        queue.load(await backend.fetch_today_plan())

        queue.apply_outcome(queue.active_contact_id, Outcome.NO_ANSWER)
        queue.advance_after(contact_id)
    """

    def __init__(self, contacts: Optional[Iterable[PlanContact]] = None, daily_target: Optional[int] = None):
        self._entries: list[PlanContact] = []
        self.daily_target = daily_target
        self.active_contact_id: Optional[str] = None
        if contacts is not None:
            self.load(contacts)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, contacts: Iterable[PlanContact]) -> None:
        """Replace the plan and point the cursor at the first uncalled contact."""
        self._entries = []
        self._append_unique(contacts)
        self._point_at_first_uncalled()
        logger.debug(f"Work queue loaded: {len(self._entries)} contacts, {len(self.uncalled)} uncalled")

    def top_up(self, contacts: Iterable[PlanContact]) -> int:
        """
        Append newly fetched contacts, skipping ids already present.

        Returns:
            Number of contacts added
        """
        added = self._append_unique(contacts)
        if self.active_contact_id is None:
            self._point_at_first_uncalled()
        logger.debug(f"Work queue topped up with {added} contacts")
        return added

    def reset(self) -> None:
        """Empty the queue (new calendar day)."""
        self._entries = []
        self.active_contact_id = None

    def _append_unique(self, contacts: Iterable[PlanContact]) -> int:
        known = {c.contact_id for c in self._entries}
        added = 0
        for contact in contacts:
            if self.daily_target is not None and len(self._entries) >= self.daily_target:
                break
            if contact.contact_id in known:
                continue
            self._entries.append(contact)
            known.add(contact.contact_id)
            added += 1
        return added

    def _point_at_first_uncalled(self) -> None:
        uncalled = self.uncalled
        self.active_contact_id = uncalled[0].contact_id if uncalled else None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PlanContact]:
        return iter(self._entries)

    def __contains__(self, contact_id: object) -> bool:
        return self.get(contact_id) is not None

    def get(self, contact_id) -> Optional[PlanContact]:
        return next((c for c in self._entries if c.contact_id == contact_id), None)

    @property
    def contacts(self) -> list[PlanContact]:
        return list(self._entries)

    @property
    def uncalled(self) -> list[PlanContact]:
        return [c for c in self._entries if not c.is_called]

    @property
    def called(self) -> list[PlanContact]:
        return [c for c in self._entries if c.is_called]

    @property
    def active_contact(self) -> Optional[PlanContact]:
        return self.get(self.active_contact_id) if self.active_contact_id else None

    @property
    def is_exhausted(self) -> bool:
        return not self.uncalled

    def tier_groups(self) -> dict[Tier, list[PlanContact]]:
        """Uncalled contacts split into tier sections."""
        return group_by_tier(self.uncalled)

    def progress(self, daily_target: Optional[int] = None) -> PlanProgress:
        target = daily_target or self.daily_target or 80
        return PlanProgress(planned=len(self._entries), called=len(self.called), daily_target=target)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_outcome(self, contact_id: str, outcome: Outcome, at: Optional[dt.datetime] = None) -> PlanContact:
        contact = self._require(contact_id)
        contact.mark_called(outcome, at)
        return contact

    def clear_outcome(self, contact_id: str) -> PlanContact:
        contact = self._require(contact_id)
        contact.reset_outcome()
        if self.active_contact_id is None:
            self.active_contact_id = contact.contact_id
        return contact

    def advance_after(self, contact_id: str, uncalled_before: Optional[list[PlanContact]] = None) -> Optional[str]:
        """
        Move the cursor past a just-logged contact.

        The new active contact is the one now occupying the logged contact's
        former position among the uncalled, clamped to the last uncalled
        contact; None once nobody is left.

        Args:
            contact_id: The contact that was just logged
            uncalled_before: Uncalled list captured before the contact was
                marked (computed now when omitted)

        Returns:
            The new active contact id
        """
        uncalled = uncalled_before if uncalled_before is not None else self.uncalled
        ids = [c.contact_id for c in uncalled]

        if contact_id not in ids:
            return self._repoint_from(contact_id)

        # The captured list only fixes the position; a poll may have replaced
        # or marked its entries since, so candidates come from the live queue.
        old_index = ids.index(contact_id)
        live = (self.get(c.contact_id) for c in uncalled)
        remaining = [c for c in live if c is not None and c.contact_id != contact_id and not c.is_called]
        if remaining:
            self.active_contact_id = remaining[min(old_index, len(remaining) - 1)].contact_id
        else:
            self._point_at_first_uncalled()

        logger.bind(active_contact_id=self.active_contact_id, remaining=len(remaining)).debug(
            f"Cursor advanced after {contact_id}"
        )
        return self.active_contact_id

    def _repoint_from(self, contact_id: str) -> Optional[str]:
        # Already marked: first uncalled at or after its queue position
        position = next((i for i, c in enumerate(self._entries) if c.contact_id == contact_id), 0)
        following = [c for c in self._entries[position:] if not c.is_called]
        if following:
            self.active_contact_id = following[0].contact_id
        else:
            self._point_at_first_uncalled()
        return self.active_contact_id

    def merge_server_rows(self, rows: Iterable[PlanContact]) -> None:
        """
        Merge a polled plan into local state.

        A server row replaces the local entry unless the local outcome is
        newer (last outcome wins by timestamp). Unknown rows are appended.
        """
        by_id = {c.contact_id: i for i, c in enumerate(self._entries)}
        for row in rows:
            index = by_id.get(row.contact_id)
            if index is None:
                if self.daily_target is None or len(self._entries) < self.daily_target:
                    self._entries.append(row)
                    by_id[row.contact_id] = len(self._entries) - 1
                continue

            local = self._entries[index]
            if local.called_at and (row.called_at is None or local.called_at > row.called_at):
                continue
            self._entries[index] = row

        active = self.active_contact
        if active is None or active.is_called:
            self._point_at_first_uncalled()

    def _require(self, contact_id: str) -> PlanContact:
        contact = self.get(contact_id)
        if contact is None:
            raise KeyError(contact_id)
        return contact
