"""
Domain: Funnel telemetry events.

A TelemetryEvent is an append-only record of one tracked interaction. It has
no identity beyond its position in the event log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from .time import require_utc_timestamp, to_iso_utc

DEFAULT_EVENT_NAME = "event"
RESERVED_KEYS = ("event", "ts")


@dataclass(frozen=True, slots=True)
class TelemetryEvent:
    event: str
    ts: datetime
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_utc_timestamp("ts", self.ts)

    @classmethod
    def build(cls, name: Any, params: Mapping[str, Any] | None, ts: datetime) -> "TelemetryEvent":
        """
        Normalize a tracking call into an event.

        Blank names become "event". Params set to None are dropped (they carry
        no information) and params cannot override event/ts.
        """

        clean = {
            key: value
            for key, value in (params or {}).items()
            if value is not None and key not in RESERVED_KEYS
        }
        return cls(event=str(name or DEFAULT_EVENT_NAME), ts=ts, params=clean)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"event": self.event, "ts": to_iso_utc(self.ts)}
        record.update(self.params)
        return record


__all__ = ["TelemetryEvent"]
