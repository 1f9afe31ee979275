"""
Telemetry sink.

Records funnel events locally and forwards them to an analytics collaborator.

Guarantees:
- Tracking never raises into the caller's flow.
- The external forward is best-effort: failures are logged and reported in the
  TrackResult, never retried.
- The event is appended to the local log whether or not the forward worked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from domain.telemetry import TelemetryEvent
from domain.time import utc_now
from repositories.bounded_store import BoundedLocalStore
from repositories.telemetry_repository import insert_event, list_events

logger = logging.getLogger(__name__)


class AnalyticsBridge(Protocol):
    """External analytics collaborator (tag manager, measurement API, ...)."""

    def send(self, event_name: str, params: Mapping[str, Any]) -> None:
        ...


class LoggingAnalyticsBridge:
    """Forwards events to the application log. Used when no vendor is configured."""

    def send(self, event_name: str, params: Mapping[str, Any]) -> None:
        logger.debug("analytics event", extra={"event_name": event_name, "event_params": dict(params)})


@dataclass
class DataLayerBridge:
    """Collects forwarded events in memory, like a tag manager's data layer."""

    events: List[Dict[str, Any]] = field(default_factory=list)

    def send(self, event_name: str, params: Mapping[str, Any]) -> None:
        self.events.append({"event": event_name, **params})


@dataclass(frozen=True, slots=True)
class TrackResult:
    """
    Outcome of a tracking call.

    forwarded: the analytics collaborator accepted the event
    stored: the event reached the local log
    error: last failure description, if any
    """

    event: TelemetryEvent
    forwarded: bool
    stored: bool
    error: Optional[str] = None


class TelemetrySink:
    def __init__(
        self,
        store: BoundedLocalStore,
        bridge: Optional[AnalyticsBridge] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.bridge = bridge
        self.clock = clock

    def track_event(self, name: str, params: Optional[Mapping[str, Any]] = None) -> TrackResult:
        event = TelemetryEvent.build(name, params, ts=self.clock())

        forwarded = False
        error: Optional[str] = None
        if self.bridge is not None:
            try:
                self.bridge.send(event.event, dict(event.params))
                forwarded = True
            except Exception as e:
                error = f"analytics forward failed: {e}"
                logger.warning(
                    "Analytics forward failed; event kept locally",
                    extra={"event_name": event.event, "error": str(e)},
                )

        result = insert_event(self.store, event)
        if not result.ok:
            error = result.error

        return TrackResult(event=event, forwarded=forwarded, stored=result.ok, error=error)

    def list_events(self) -> List[dict]:
        return list_events(self.store)


__all__ = [
    "AnalyticsBridge",
    "DataLayerBridge",
    "LoggingAnalyticsBridge",
    "TelemetrySink",
    "TrackResult",
]
