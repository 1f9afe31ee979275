"""
Pytest configuration for pipeline tests.

This file adds the parent directory to the Python path so that tests
can import from the domain, repositories, services and api modules, and
provides shared fixtures (in-memory store, fixed-clock session context,
telemetry sink with a recording bridge).
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.session import SessionContext  # noqa: E402
from repositories.bounded_store import BoundedLocalStore  # noqa: E402
from repositories.storage import MemoryStorage  # noqa: E402
from services.telemetry_service import DataLayerBridge, TelemetrySink  # noqa: E402

FIXED_NOW = datetime(2025, 3, 14, 9, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class FailingStorage:
    """Storage surface where every operation raises."""

    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("quota exceeded")

    def remove_item(self, key):
        raise OSError("storage unavailable")


class WriteFailingStorage(MemoryStorage):
    """Readable storage that rejects every write."""

    def set_item(self, key, value):
        raise OSError("quota exceeded")


@pytest.fixture
def surface() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(surface) -> BoundedLocalStore:
    return BoundedLocalStore(surface)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(clock) -> SessionContext:
    return SessionContext(page_url="/", owner_name="Acme Studio", clock=clock)


@pytest.fixture
def bridge() -> DataLayerBridge:
    return DataLayerBridge()


@pytest.fixture
def telemetry(store, bridge, clock) -> TelemetrySink:
    return TelemetrySink(store, bridge=bridge, clock=clock)


@pytest.fixture
def failing_store() -> BoundedLocalStore:
    return BoundedLocalStore(FailingStorage())


@pytest.fixture
def write_failing_store() -> BoundedLocalStore:
    return BoundedLocalStore(WriteFailingStorage())
