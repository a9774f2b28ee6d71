"""
Tests for the dashboard API routes.

Each test runs the real lifespan against an in-memory backend.
"""
import datetime as dt

import pytest
from fastapi.testclient import TestClient

from callplan.api.main import create_app
from callplan.models.enums import AgendaKind


@pytest.fixture
def client(backend, agenda_repo):
    """Test client with lifespan (plan loaded, pollers disabled)."""
    app = create_app(backend=backend, agenda_repo=agenda_repo)
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "callplan"
        assert "version" in data

    def test_ready_after_plan_loaded(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["planned"] == 3

    def test_not_ready_when_backend_down(self, backend, agenda_repo):
        backend.fail_next("fetch_today_plan")
        app = create_app(backend=backend, agenda_repo=agenda_repo)

        with TestClient(app) as client:
            response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestPlanEndpoints:

    def test_get_plan_grouped_by_tier(self, client):
        data = client.get("/plan").json()

        assert data["active_contact_id"] == "A"
        assert data["progress"]["planned"] == 3
        assert data["progress"]["remaining"] == 3
        assert [s["label"] for s in data["sections"]] == ["Prime Targets", "Warm Leads", "Cold Calls"]
        assert [c["contact_id"] for c in data["sections"][0]["contacts"]] == ["A"]
        assert data["sections"][0]["contacts"][0]["tier"] == "high"
        assert data["called"] == []

    def test_log_outcome_advances(self, client):
        response = client.post("/plan/B/outcome", json={"outcome": "no_answer"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["state"] == "logged"
        assert data["active_contact_id"] == "C"
        assert data["follow_up"] is None

        plan = client.get("/plan").json()
        assert [c["contact_id"] for c in plan["called"]] == ["B"]

    def test_left_message_offers_follow_up(self, client):
        data = client.post("/plan/A/outcome", json={"outcome": "left_message", "note": "try Friday"}).json()

        assert data["follow_up"]["days_offset"] == 2
        assert data["follow_up"]["fire_at"].endswith(("+11:00", "+10:00"))
        assert data["note"].endswith("| Left Message: try Friday")

    def test_invalid_outcome(self, client):
        response = client.post("/plan/A/outcome", json={"outcome": "voicemail_full"})

        assert response.status_code == 422
        assert response.json()["retryable"] is False

    def test_unknown_contact(self, client):
        response = client.post("/plan/Z/outcome", json={"outcome": "connected"})
        assert response.status_code == 404

    def test_backend_failure_is_retryable(self, client, backend):
        backend.fail_next("patch_outcome")

        failed = client.post("/plan/A/outcome", json={"outcome": "connected"}).json()

        assert failed["success"] is False
        assert failed["retryable"] is True
        assert failed["state"] == "logging"

        retried = client.post("/plan/A/retry", json={}).json()
        assert retried["success"] is True
        assert retried["active_contact_id"] == "B"

    def test_relog(self, client):
        client.post("/plan/A/outcome", json={"outcome": "not_interested"})

        response = client.post("/plan/A/relog", json={})

        assert response.json() == {"contact_id": "A", "state": "uncalled"}
        plan = client.get("/plan").json()
        assert plan["called"] == []


class TestReminderEndpoints:

    def test_follow_up_commit_and_dedupe(self, client):
        first = client.post("/reminders", json={"contact_id": "A", "follow_up_outcome": "connected"})
        second = client.post("/reminders", json={"contact_id": "A", "follow_up_outcome": "connected"})

        assert first.status_code == 201
        assert first.json()["created"] is True
        assert first.json()["reminder"]["note"] == "Follow up: Connected"
        assert second.json()["created"] is False

    def test_hand_made_reminder_defaults_to_tomorrow(self, client):
        response = client.post("/reminders", json={"note": "Call the strata manager"})

        assert response.status_code == 201
        reminder = response.json()["reminder"]
        assert "T09:00:00" in reminder["fire_at"]

        buckets = client.get("/reminders").json()["buckets"]
        assert [b["bucket"] for b in buckets] == ["tomorrow"]

    def test_empty_note_rejected(self, client, backend):
        response = client.post("/reminders", json={"note": "", "is_task": True})

        assert response.status_code == 422
        assert not any(op == "create_reminder" for op, _ in backend.calls)

    def test_due_reminders_listed(self, client, now):
        client.post("/reminders", json={"note": "Chase contract", "fire_at": (now - dt.timedelta(hours=1)).isoformat()})

        due = client.get("/reminders").json()["due"]

        assert [r["note"] for r in due] == ["Chase contract"]

    def test_week_strip(self, client):
        week = client.get("/reminders").json()["week"]

        assert len(week) == 7
        assert sum(day["is_today"] for day in week) == 1


class TestAgendaEndpoints:

    def test_agenda_toggle_and_manual(self, client):
        agenda = client.get("/agenda").json()
        plan_item = agenda["items"][0]
        assert plan_item["kind"] == AgendaKind.PLAN_SUMMARY
        assert plan_item["label"] == "3 contacts in today's call plan"
        assert agenda["next"]["key"] == plan_item["key"]

        toggled = client.post(f"/agenda/{plan_item['key']}/toggle").json()
        assert toggled["checked"] is True

        created = client.post("/agenda/manual", json={"label": "Letterbox drop"})
        assert created.status_code == 201

        agenda = client.get("/agenda").json()
        assert agenda["done"] == 1
        assert agenda["total"] == 2
        assert agenda["next"]["label"] == "Letterbox drop"

    def test_manual_item_requires_label(self, client):
        response = client.post("/agenda/manual", json={"label": ""})
        assert response.status_code == 422


class TestMetricsEndpoint:

    def test_prometheus_output(self, client):
        client.post("/plan/A/outcome", json={"outcome": "connected"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'callplan_outcomes_logged_total{context="todays_plan",outcome="connected"} 1.0' in response.text
        assert "callplan_queue_remaining 2" in response.text
