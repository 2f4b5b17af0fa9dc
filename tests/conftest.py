"""Shared pytest fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from tracepoint.config import Config, FreshnessSource
from tracepoint.core.core import Core
from tracepoint.core.modules.user.store import InMemoryUserStore

TEST_SECRET = "test-secret-key-that-is-long-enough-for-both-hs256-and-hs512-signing"


class FakeClock:
    """Manually advanced clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


def build_config(**overrides) -> Config:
    values = {"jwt_secret_key": TEST_SECRET, "database_url": None, "cors_origins": []}
    values.update(overrides)
    return Config(_env_file=None, **values)


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def make_config():
    """Factory for configs with test defaults and per-test overrides."""
    return build_config


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def core(config, user_store, clock):
    return Core(config, user_store=user_store, clock=clock)


@pytest.fixture
def token_core(user_store, clock):
    """Core whose location throttle reads only the token's lastUpdated claim."""
    return Core(build_config(freshness_source=FreshnessSource.TOKEN), user_store=user_store, clock=clock)
