"""
Telemetry repository (persistence).

Append-only funnel event log, newest last, bounded to EVENT_CAPACITY entries.
"""

from __future__ import annotations

from typing import List

from domain.telemetry import TelemetryEvent
from repositories.bounded_store import BoundedLocalStore, StoreResult

EVENT_STORE_KEY: str = "funnelEvents_v1"
EVENT_CAPACITY: int = 600


def insert_event(store: BoundedLocalStore, event: TelemetryEvent) -> StoreResult:
    return store.append(EVENT_STORE_KEY, event.to_record(), capacity=EVENT_CAPACITY)


def list_events(store: BoundedLocalStore) -> List[dict]:
    """Persisted event records, oldest first."""

    return [row for row in store.read_sequence(EVENT_STORE_KEY) if isinstance(row, dict)]


def clear_events(store: BoundedLocalStore) -> StoreResult:
    return store.clear(EVENT_STORE_KEY)


__all__ = [
    "EVENT_CAPACITY",
    "EVENT_STORE_KEY",
    "clear_events",
    "insert_event",
    "list_events",
]
