"""Shared fixtures: an engine over a fresh in-memory store and a fake clock."""
from datetime import datetime, timedelta, timezone

import pytest

from circulation.engine import LendingEngine
from circulation.store import InMemoryDocumentStore

START = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock the tests move by hand."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(max_retries=3, retry_backoff=0)


@pytest.fixture
async def engine(store, clock):
    engine = LendingEngine(store, clock=clock, max_window_days=15)
    await engine.start()
    yield engine
    await engine.close()


@pytest.fixture
async def book(engine):
    """A title with two copies costing 20.0."""
    return await engine.add_book(
        "9780132350884", title="Clean Code", author="Robert C. Martin", total_copies=2
    )


@pytest.fixture
async def accepted_request(engine, book):
    request = await engine.submit_request("member-1", book.isbn)
    return await engine.accept_request(request.id)


@pytest.fixture
async def loan(engine, accepted_request):
    return await engine.issue(accepted_request.id)
