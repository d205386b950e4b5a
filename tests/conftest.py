from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.token_store.memory import InMemoryTokenStore
from services.token_manager import TokenManager
from shared.crypto import TokenHasher

TEST_HMAC_KEY = "test-hmac-key-not-for-production"


class FakeClock:
    """Callable clock that tests advance explicitly."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryTokenStore()


@pytest.fixture
def hasher():
    return TokenHasher(TEST_HMAC_KEY)


@pytest.fixture
def manager(store, hasher, clock):
    return TokenManager(store, hasher, clock=clock)
