"""
Tests for `domain/telemetry.py` and `services/telemetry_service.py`.

Covers contract rules:
- Every tracked event is appended to the local log with an ISO timestamp.
- The log keeps the newest 600 events.
- A failing analytics forward never prevents local storage or raises.
"""

from __future__ import annotations

from datetime import datetime, timezone

from domain.telemetry import TelemetryEvent
from repositories.telemetry_repository import EVENT_CAPACITY
from services.telemetry_service import TelemetrySink


class ExplodingBridge:
    def send(self, event_name, params):
        raise ConnectionError("collector offline")


def test_track_event_stores_and_forwards(telemetry, bridge) -> None:
    result = telemetry.track_event("cta_booking_click", {"position": "hero"})

    assert result.stored is True
    assert result.forwarded is True
    assert telemetry.list_events() == [
        {"event": "cta_booking_click", "ts": "2025-03-14T09:30:00.000Z", "position": "hero"}
    ]
    assert bridge.events == [{"event": "cta_booking_click", "position": "hero"}]


def test_forward_failure_still_stores_event(store, clock) -> None:
    """Verify an unavailable analytics collaborator does not lose the event."""

    sink = TelemetrySink(store, bridge=ExplodingBridge(), clock=clock)

    result = sink.track_event("contact_submit", {"score": 18})

    assert result.forwarded is False
    assert result.stored is True
    assert "collector offline" in result.error
    assert [event["event"] for event in sink.list_events()] == ["contact_submit"]


def test_storage_failure_is_reported_not_raised(failing_store, clock) -> None:
    sink = TelemetrySink(failing_store, clock=clock)

    result = sink.track_event("session_start")

    assert result.stored is False
    assert result.error


def test_event_log_keeps_newest_600(telemetry, clock) -> None:
    for i in range(EVENT_CAPACITY + 3):
        telemetry.track_event("tick", {"n": i})

    events = telemetry.list_events()

    assert len(events) == 600
    assert events[0]["n"] == 3
    assert events[-1]["n"] == 602


def test_params_cannot_override_name_or_timestamp() -> None:
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)

    event = TelemetryEvent.build("contact_success", {"event": "spoof", "ts": "1999", "score": 70}, ts)

    assert event.to_record() == {"event": "contact_success", "ts": "2025-01-01T00:00:00.000Z", "score": 70}


def test_blank_name_and_none_params() -> None:
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)

    event = TelemetryEvent.build("", {"utm_source": None, "path": "/"}, ts)

    assert event.event == "event"
    assert dict(event.params) == {"path": "/"}
