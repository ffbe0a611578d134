from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from wardflow.core.state import reset_store
from wardflow.services.cache import MemoryCache
from wardflow.services.encounter_store import EncounterStore


class TickingClock:
    """Moves one second forward on every call so updated_at always changes."""

    def __init__(self, start=datetime(2026, 2, 5, 8, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def store(cache, clock):
    """Empty ward, no default census."""
    return EncounterStore(cache=cache, seed=None, clock=clock)


@pytest.fixture
def ward_store(cache, clock):
    """Starts from the default four-patient census."""
    return EncounterStore(cache=cache, clock=clock)


@pytest.fixture
def admitted(store):
    return store.register_admission(
        {
            "patientId": "P1",
            "mrn": "M1",
            "patientName": "Amit Verma",
            "consultant": "Dr. Nisha Rao",
            "ward": "Medical Ward - 2",
            "diagnosis": "Cellulitis",
        }
    )


@pytest.fixture
def notifications(store):
    calls = []
    unsubscribe = store.subscribe(lambda: calls.append(store.get_snapshot()))
    yield calls
    unsubscribe()


@pytest.fixture
def client(ward_store):
    from wardflow.main import create_app

    reset_store(ward_store)
    with TestClient(create_app()) as test_client:
        yield test_client
    reset_store()
