"""
Tests for the work queue and its auto-advance cursor.
"""
import pytest
import datetime as dt

from callplan.core.work_queue import WorkQueue
from callplan.models.enums import Outcome, Tier


def log(queue: WorkQueue, contact_id: str, outcome=Outcome.NO_ANSWER):
    """Mark a contact the way the state machine does, then advance."""
    before = queue.uncalled
    queue.apply_outcome(contact_id, outcome)
    return queue.advance_after(contact_id, before)


class TestLoad:

    def test_active_is_first_uncalled(self, plan_contacts):
        plan_contacts[0].mark_called(Outcome.CONNECTED)
        queue = WorkQueue(plan_contacts)

        assert queue.active_contact_id == "B"
        assert [c.contact_id for c in queue.uncalled] == ["B", "C"]
        assert [c.contact_id for c in queue.called] == ["A"]

    def test_empty_plan(self):
        queue = WorkQueue([])
        assert queue.active_contact_id is None
        assert queue.is_exhausted

    def test_reset_clears_everything(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        queue.reset()
        assert len(queue) == 0
        assert queue.active_contact_id is None


class TestAutoAdvance:

    def test_middle_contact_advances_to_next(self, plan_contacts):
        queue = WorkQueue(plan_contacts)

        assert log(queue, "B") == "C"
        assert [c.contact_id for c in queue.uncalled] == ["A", "C"]

    def test_first_contact_advances_to_next(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        assert log(queue, "A") == "B"

    def test_last_contact_moves_back_to_new_last(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        assert log(queue, "C") == "B"

    def test_last_remaining_contact_exhausts_queue(self, contact_factory):
        queue = WorkQueue([contact_factory("A")])

        assert log(queue, "A") is None
        assert queue.is_exhausted

    def test_whole_plan_walkthrough(self, plan_contacts):
        queue = WorkQueue(plan_contacts)

        assert log(queue, queue.active_contact_id) == "B"
        assert log(queue, queue.active_contact_id) == "C"
        assert log(queue, queue.active_contact_id) is None

    def test_already_called_contact_repoints_forward(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        queue.apply_outcome("A", Outcome.CONNECTED)

        assert queue.advance_after("A") == "B"

    def test_skips_contact_marked_by_merge_after_capture(self, plan_contacts, contact_factory):
        queue = WorkQueue(plan_contacts)
        before = queue.uncalled

        server = contact_factory("C", score=10)
        server.mark_called(Outcome.CONNECTED)
        queue.merge_server_rows([server])
        queue.apply_outcome("B", Outcome.NO_ANSWER)

        assert queue.advance_after("B", before) == "A"
        assert not queue.active_contact.is_called

    def test_picks_up_contacts_appended_after_capture(self, contact_factory):
        queue = WorkQueue([contact_factory("A")])
        before = queue.uncalled

        queue.merge_server_rows([contact_factory("D")])
        queue.apply_outcome("A", Outcome.NO_ANSWER)

        assert queue.advance_after("A", before) == "D"


class TestTopUp:

    def test_skips_existing_ids(self, plan_contacts, contact_factory):
        queue = WorkQueue(plan_contacts)

        added = queue.top_up([contact_factory("C"), contact_factory("D")])

        assert added == 1
        assert [c.contact_id for c in queue] == ["A", "B", "C", "D"]

    def test_capped_at_daily_target(self, contact_factory):
        queue = WorkQueue(daily_target=3)
        queue.load([contact_factory("A"), contact_factory("B")])

        added = queue.top_up([contact_factory(x) for x in "CDE"])

        assert added == 1
        assert len(queue) == 3

    def test_top_up_revives_exhausted_cursor(self, contact_factory):
        queue = WorkQueue([contact_factory("A")])
        log(queue, "A")

        queue.top_up([contact_factory("B")])

        assert queue.active_contact_id == "B"


class TestRelogAndViews:

    def test_clear_outcome_returns_contact_to_uncalled(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        log(queue, "B")

        queue.clear_outcome("B")

        assert [c.contact_id for c in queue.uncalled] == ["A", "B", "C"]

    def test_unknown_contact(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        assert "Z" not in queue
        with pytest.raises(KeyError):
            queue.apply_outcome("Z", Outcome.CONNECTED)

    def test_tier_groups_only_uncalled(self, plan_contacts):
        queue = WorkQueue(plan_contacts)
        log(queue, "A")

        groups = queue.tier_groups()

        assert groups[Tier.HIGH] == []
        assert [c.contact_id for c in groups[Tier.MED]] == ["B"]
        assert [c.contact_id for c in groups[Tier.LOW]] == ["C"]

    def test_progress(self, plan_contacts):
        queue = WorkQueue(plan_contacts, daily_target=80)
        log(queue, "A")

        progress = queue.progress()

        assert progress.planned == 3
        assert progress.called == 1
        assert progress.remaining == 2
        assert progress.percent == 33


class TestMergeServerRows:

    def test_newer_local_outcome_wins(self, plan_contacts, contact_factory):
        queue = WorkQueue(plan_contacts)
        local_time = dt.datetime(2026, 3, 4, 4, 0, tzinfo=dt.UTC)
        queue.apply_outcome("A", Outcome.CONNECTED, local_time)

        stale = contact_factory("A", score=50)
        queue.merge_server_rows([stale])

        assert queue.get("A").outcome == Outcome.CONNECTED

    def test_newer_server_outcome_wins(self, plan_contacts, contact_factory):
        queue = WorkQueue(plan_contacts)
        queue.apply_outcome("A", Outcome.NO_ANSWER, dt.datetime(2026, 3, 4, 4, 0, tzinfo=dt.UTC))

        server = contact_factory("A", score=50)
        server.mark_called(Outcome.APPRAISAL_BOOKED, dt.datetime(2026, 3, 4, 5, 0, tzinfo=dt.UTC))
        queue.merge_server_rows([server])

        assert queue.get("A").outcome == Outcome.APPRAISAL_BOOKED

    def test_server_called_row_moves_cursor(self, plan_contacts, contact_factory):
        queue = WorkQueue(plan_contacts)
        server = contact_factory("A", score=50)
        server.mark_called(Outcome.CONNECTED)

        queue.merge_server_rows([server, contact_factory("D")])

        assert queue.active_contact_id == "B"
        assert [c.contact_id for c in queue] == ["A", "B", "C", "D"]
