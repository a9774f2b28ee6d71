"""
Tests for plan contact and reminder models.
"""
import pytest
import datetime as dt
from pydantic import ValidationError

from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome, Tier
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.models.stats import PlanProgress


class TestPlanContact:

    def test_backend_row_field_names(self):
        contact = PlanContact.model_validate({
            "id": 42,
            "name": "Jane Smith",
            "propensity_score": 52,
            "contact_tenure_years": 9,
            "contact_occupancy": "Rented",
        })

        assert contact.contact_id == "42"
        assert contact.score == 52
        assert contact.tenure_years == 9
        assert contact.occupancy == "Rented"
        assert contact.tier == Tier.HIGH

    def test_score_falls_back_to_contact_score(self):
        contact = PlanContact.model_validate({"contact_id": "1", "contact_score": 25})
        assert contact.tier == Tier.MED

    def test_null_score_is_zero(self):
        contact = PlanContact.model_validate({"contact_id": "1", "score": None})
        assert contact.score == 0
        assert contact.tier == Tier.LOW

    def test_tier_recomputed_on_every_read(self, contact_factory):
        contact = contact_factory("A", score=10)
        assert contact.tier == Tier.LOW

        contact.score = 50
        assert contact.tier == Tier.HIGH

    def test_outcome_requires_called_at(self):
        with pytest.raises(ValidationError):
            PlanContact(contact_id="1", outcome=Outcome.CONNECTED)

    def test_mark_called_and_reset(self, contact_factory):
        contact = contact_factory("A")
        at = dt.datetime(2026, 3, 4, 3, 0)

        contact.mark_called(Outcome.NO_ANSWER, at)

        assert contact.is_called
        assert contact.outcome == Outcome.NO_ANSWER
        assert contact.called_at.tzinfo is not None

        contact.reset_outcome()

        assert not contact.is_called
        assert contact.outcome is None
        assert contact.called_at is None

    def test_display_address(self, contact_factory):
        assert contact_factory("A").display_address == "A Penshurst St, Willoughby"
        assert contact_factory("B", address=None).display_address == "Willoughby"

    def test_payload_excludes_derived_fields(self, contact_factory):
        payload = contact_factory("A").to_payload()
        assert "tier" not in payload
        assert "signals" not in payload
        assert payload["contact_id"] == "A"


class TestReminderModels:

    def test_reminder_needs_fire_at_unless_task(self):
        with pytest.raises(ValidationError):
            Reminder(id="1", note="Call back")
        assert Reminder(id="1", note="Pack signboards", is_task=True).fire_at is None

    def test_draft_rejects_unknown_duration(self, now):
        with pytest.raises(ValidationError):
            ReminderDraft(note="x", fire_at=now, duration_minutes=45)

    def test_draft_rejects_empty_note(self, now):
        with pytest.raises(ValidationError):
            ReminderDraft(note="", fire_at=now)

    def test_reminder_ids_are_strings(self, now):
        reminder = Reminder(id=7, contact_id=42, note="x", fire_at=now)
        assert reminder.id == "7"
        assert reminder.contact_id == "42"
        assert reminder.is_open


class TestPlanProgress:

    def test_remaining_and_percent(self):
        progress = PlanProgress(planned=40, called=10)
        assert progress.remaining == 30
        assert progress.percent == 25

    def test_empty_plan(self):
        progress = PlanProgress(planned=0, called=0)
        assert progress.remaining == 0
        assert progress.percent == 0
