import logging

import pytest

from tickoracle.config import AdapterConfig
from tickoracle.feeds.memory import InMemoryPriceFeed
from tickoracle.oracle.adapter import create_adapter

NOW = 1_700_000_000

ETH_USD = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
BTC_USD = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"


class FakeClock:
    """Settable clock returning whole seconds."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def feed(clock):
    return InMemoryPriceFeed(clock=clock)


@pytest.fixture
def make_adapter(feed, clock):
    """Build an adapter over the in-memory feed with the shared fake clock."""

    def _make(**overrides):
        params = {"feed_id": ETH_USD, "max_age": 60}
        params.update(overrides)
        return create_adapter(feed, AdapterConfig(**params), clock=clock)

    return _make


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs reconfigure the package logger; restore it after each test."""
    package_logger = logging.getLogger("tickoracle")
    handlers = package_logger.handlers[:]
    level = package_logger.level
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
