"""
EventDesk Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── event_store: In-memory EventStore (no MongoDB needed)
    ├── clock: Deterministic clock advancing one second per call
    ├── event_service: EventService wired to event_store and clock
    ├── sample_event_payload: A complete create payload
    └── test_client: HTTPX AsyncClient talking to an app built on event_store
"""

import copy
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

# Override settings for testing BEFORE any app imports
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["DB_NAME"] = "events_test"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from eventdesk.services.event_service import EventService
from eventdesk.services.store_base import EventStore, UpdateOutcome

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryEventStore(EventStore):
    """
    EventStore keeping documents in a list, in insertion order.

    Mirrors the MongoDB behaviour the service relies on: copies in and out,
    stable descending sort on `schedule` with nulls last, `$set` merges.
    """

    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.closed = False

    def _index(self, event_id: ObjectId) -> Optional[int]:
        for i, doc in enumerate(self.documents):
            if doc["_id"] == event_id:
                return i
        return None

    async def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        stored = copy.deepcopy(document)
        stored["_id"] = ObjectId()
        self.documents.append(stored)
        return stored["_id"]

    async def find_by_id(self, event_id: ObjectId) -> Optional[Dict[str, Any]]:
        i = self._index(event_id)
        return copy.deepcopy(self.documents[i]) if i is not None else None

    async def find_page(self, skip: int, limit: int) -> List[Dict[str, Any]]:
        ordered = sorted(
            self.documents,
            key=lambda d: (d.get("schedule") is not None, d.get("schedule") or _OLDEST),
            reverse=True,
        )
        return copy.deepcopy(ordered[skip:skip + limit])

    async def count(self) -> int:
        return len(self.documents)

    async def update_by_id(self, event_id: ObjectId, fields: Dict[str, Any]) -> UpdateOutcome:
        i = self._index(event_id)
        if i is None:
            return UpdateOutcome(matched_count=0, modified_count=0)
        doc = self.documents[i]
        modified = any(doc.get(k, object()) != v for k, v in fields.items())
        doc.update(copy.deepcopy(fields))
        return UpdateOutcome(matched_count=1, modified_count=1 if modified else 0)

    async def delete_by_id(self, event_id: ObjectId) -> int:
        i = self._index(event_id)
        if i is None:
            return 0
        del self.documents[i]
        return 1

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self.closed = True


class TickingClock:
    """Returns a fixed start time, then one second later on every call."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def event_service(event_store, clock) -> EventService:
    return EventService(event_store, clock=clock)


@pytest.fixture
def sample_event_payload() -> Dict[str, Any]:
    """A create payload using every client-settable field."""
    return {
        "uid": "user-18",
        "name": "Graph Theory Meetup",
        "tagline": "Edges and vertices",
        "schedule": "2024-03-01T18:30:00Z",
        "description": "An evening of proofs.",
        "files": {"image": "https://cdn.example.com/graph.png"},
        "moderator": "user-7",
        "category": "math",
        "sub_category": "combinatorics",
        "rigor_rank": "4",
        "attendees": ["user-1", "user-2"],
    }


@pytest_asyncio.fixture
async def test_client(event_store):
    """
    Async HTTP client routed straight into an app built on `event_store`.

    ASGITransport does not run the lifespan, so no MongoDB connection is made.
    """
    from eventdesk.main import create_app

    app = create_app(event_store=event_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
