"""
Tests for the cadence scheduler.

Follow-ups always land at 09:00 local on the target day.
"""
import pytest
import datetime as dt

from callplan.engine.cadence import (
    FOLLOW_UP_DAYS,
    FollowUpSuggestion,
    is_follow_up_outcome,
    suggest_follow_up,
)
from callplan.models.enums import Outcome, ReminderPriority
from callplan.models.reminder import ReminderDraft


class TestSuggestFollowUp:

    def test_left_message_two_days_at_nine(self, now):
        # 2026-03-04 14:30 -> 2026-03-06 09:00
        suggestion = suggest_follow_up(Outcome.LEFT_MESSAGE, now)

        assert suggestion.days_offset == 2
        assert suggestion.fire_at == dt.datetime(2026, 3, 6, 9, 0, tzinfo=now.tzinfo)
        assert suggestion.duration_minutes == 30

    @pytest.mark.parametrize("outcome", [Outcome.CONNECTED, Outcome.CALLBACK_REQUESTED])
    def test_one_day_outcomes(self, now, outcome):
        suggestion = suggest_follow_up(outcome, now)
        assert suggestion.fire_at == dt.datetime(2026, 3, 5, 9, 0, tzinfo=now.tzinfo)

    def test_late_evening_call_still_next_morning(self, now):
        late = now.replace(hour=23, minute=59)
        suggestion = suggest_follow_up(Outcome.CONNECTED, late)
        assert suggestion.fire_at.date() == dt.date(2026, 3, 5)
        assert suggestion.fire_at.hour == 9

    @pytest.mark.parametrize("outcome", [
        Outcome.NO_ANSWER,
        Outcome.NOT_INTERESTED,
        Outcome.APPRAISAL_BOOKED,
    ])
    def test_ineligible_outcomes(self, now, outcome):
        assert suggest_follow_up(outcome, now) is None
        assert not is_follow_up_outcome(outcome)

    def test_accepts_string_outcome(self, now):
        assert suggest_follow_up("left_message", now).days_offset == 2

    def test_unknown_outcome_is_not_eligible(self):
        assert is_follow_up_outcome("voicemail_full") is False

    def test_rejects_unknown_duration(self, now):
        with pytest.raises(ValueError):
            suggest_follow_up(Outcome.CONNECTED, now, duration_minutes=45)

    def test_eligible_set(self):
        assert set(FOLLOW_UP_DAYS) == {
            Outcome.CONNECTED,
            Outcome.LEFT_MESSAGE,
            Outcome.CALLBACK_REQUESTED,
        }


class TestToDraft:

    @pytest.fixture
    def suggestion(self, now) -> FollowUpSuggestion:
        return suggest_follow_up(Outcome.LEFT_MESSAGE, now)

    def test_synthesizes_note_from_outcome(self, suggestion, contact_factory):
        draft = suggestion.to_draft(contact_factory("A"))

        assert isinstance(draft, ReminderDraft)
        assert draft.note == "Follow up: Left Message"
        assert draft.contact_id == "A"
        assert draft.contact_name == "Owner A"
        assert draft.fire_at == suggestion.fire_at
        assert draft.duration_minutes == 30

    def test_operator_overrides(self, suggestion, now):
        custom = now + dt.timedelta(days=5)
        draft = suggestion.to_draft(
            note="  bring CMA  ",
            duration_minutes=60,
            fire_at=custom,
            priority=ReminderPriority.HIGH,
        )

        assert draft.note == "bring CMA"
        assert draft.duration_minutes == 60
        assert draft.fire_at == custom
        assert draft.priority == ReminderPriority.HIGH
        assert draft.contact_id is None
