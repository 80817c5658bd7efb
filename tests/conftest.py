"""
Shared fixtures: an app on in-memory SQLite, a recording event emitter,
and helpers to seed rows through the app's own session factory.
"""

import itertools
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from automarket.config import Settings
from automarket.main import create_app
from automarket.models import Services, Users
from automarket.services.events import get_events

WEEKDAY_HOURS = [
    {"day_of_week": day, "start": "09:00", "end": "12:00"} for day in range(7)
]


class RecordingEvents:
    """Stands in for EventEmitter; keeps what would have been pushed to Redis."""

    def __init__(self):
        self.emitted = []
        self.broadcasts = []

    def emit(self, event_type, payload, recipients):
        if recipients:
            self.emitted.append((event_type, payload, list(recipients)))

    def broadcast(self, event_type, payload):
        self.broadcasts.append((event_type, payload))

    def types(self):
        return [event_type for event_type, _, _ in self.emitted]

    def recipients_of(self, event_type):
        return [r for t, _, recipients in self.emitted if t == event_type for r in recipients]


def next_date_for_weekday(weekday: int) -> date:
    """First future date whose weekday index (0 = Sunday) matches."""
    d = date.today() + timedelta(days=1)
    while (d.weekday() + 1) % 7 != weekday:
        d += timedelta(days=1)
    return d


def headers_for(user) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        auto_create_schema=True,
        broadcast_expiry_interval_seconds=0,
        _env_file=None,
    )


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def client(settings, events):
    app = create_app(settings)
    app.dependency_overrides[get_events] = lambda: events
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seed(client):
    """Persist a model instance and return it detached with attributes loaded."""

    def _seed(obj):
        db = client.app.state.session_factory()
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            db.expunge(obj)
            return obj
        finally:
            db.close()

    return _seed


@pytest.fixture
def fetch(client):
    """Read a fresh copy of a row, bypassing any session state."""

    def _fetch(model, pk):
        db = client.app.state.session_factory()
        try:
            obj = db.get(model, pk)
            if obj is not None:
                db.expunge(obj)
            return obj
        finally:
            db.close()

    return _fetch


@pytest.fixture
def make_user(seed):
    counter = itertools.count(1)

    def _make_user(role="customer", **kwargs):
        n = next(counter)
        kwargs.setdefault("email", f"{role}{n}@example.com")
        kwargs.setdefault("first_name", f"{role.title()}{n}")
        return seed(Users(role=role, **kwargs))

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def vendor(make_user):
    return make_user("vendor")


@pytest.fixture
def make_service(seed):
    def _make_service(**kwargs):
        kwargs.setdefault("name", "Oil change")
        kwargs.setdefault("price", 150.0)
        kwargs.setdefault("working_hours", WEEKDAY_HOURS)
        kwargs.setdefault("slot_duration_minutes", 60)
        return seed(Services(**kwargs))

    return _make_service


@pytest.fixture
def service(make_service):
    return make_service()
