import pytest
import datetime as dt
from zoneinfo import ZoneInfo

from callplan.config import get_settings
from callplan.models.contact import PlanContact
from callplan.repositories.agenda_state import AgendaStateRepository
from callplan.services.memory_backend import InMemoryCallPlanBackend
from callplan.utils.metrics import metrics

SYDNEY = ZoneInfo("Australia/Sydney")


@pytest.fixture(autouse=True)
def test_settings(monkeypatch, tmp_path):
    """Pin settings for every test: Sydney time, no pollers, temp agenda state."""
    monkeypatch.setenv("LOCAL_TIMEZONE", "Australia/Sydney")
    monkeypatch.setenv("ENABLE_POLLERS", "false")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("AGENDA_STATE_PATH", str(tmp_path / "agenda_state.json"))
    monkeypatch.delenv("BACKEND_TOKEN", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def now():
    """Wednesday 4 March 2026, 14:30 Sydney time."""
    return dt.datetime(2026, 3, 4, 14, 30, tzinfo=SYDNEY)


def make_contact(contact_id: str, score: float = 30, **fields) -> PlanContact:
    """Plan contact with a street address derived from its id."""
    fields.setdefault("name", f"Owner {contact_id}")
    fields.setdefault("mobile", "0400 000 000")
    fields.setdefault("address", f"{contact_id} Penshurst St")
    fields.setdefault("suburb", "Willoughby")
    return PlanContact(contact_id=contact_id, score=score, **fields)


@pytest.fixture
def plan_contacts():
    """Three uncalled contacts A, B, C in plan order."""
    return [
        make_contact("A", score=50),
        make_contact("B", score=30),
        make_contact("C", score=10),
    ]


@pytest.fixture
def backend(plan_contacts):
    """Backend holding its own copy of the plan."""
    return InMemoryCallPlanBackend(plan=[c.model_copy(deep=True) for c in plan_contacts])


@pytest.fixture
def agenda_repo(tmp_path):
    return AgendaStateRepository(tmp_path / "agenda.json")


@pytest.fixture
def contact_factory():
    return make_contact
