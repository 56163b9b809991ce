"""
Main pytest configuration for all backend tests.

Fixtures, configuration, and utilities for unit, integration, and performance tests.
"""

import os

import pytest

# Set test environment variables before importing boundcache modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

from boundcache.core.config import get_settings
from boundcache.core.testing import ManualClock
from boundcache.domain.cache.bounded_cache import BoundedCache
from boundcache.domain.cache.repository_interfaces import CacheEventListener


class RecordingListener(CacheEventListener):
    """Listener that records every event it receives."""

    def __init__(self):
        self.events = []

    def on_hit(self, key):
        self.events.append(("hit", key))

    def on_miss(self, key):
        self.events.append(("miss", key))

    def on_set(self, key, size):
        self.events.append(("set", key))

    def on_remove(self, key, size):
        self.events.append(("remove", key))

    def on_evict(self, key):
        self.events.append(("evict", key))

    def on_expire(self, key):
        self.events.append(("expire", key))

    def on_clear(self, removed):
        self.events.append(("clear", removed))

    def of_kind(self, kind):
        return [key for event, key in self.events if event == kind]


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings for every test so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    """Deterministic clock starting at t=1000s."""
    return ManualClock(start=1000.0)


@pytest.fixture
def cache(clock):
    """Small cache with no default TTL driven by the manual clock."""
    return BoundedCache(capacity=3, clock=clock)


@pytest.fixture
def listener():
    return RecordingListener()
