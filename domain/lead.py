"""
Domain: Lead entity and operational decision types.

Contract excerpts implemented here:
- A Lead represents one prospective client's qualified interest and is
  identified by an opaque lead_id string.
- created_at is a UTC timestamp assigned by the ledger.
- A Lead is written exactly once and is never mutated afterwards.
- Every Lead carries the channel (type) that produced it: contact, booking or
  analysis.
- Stage and priority share cutoffs: >= 80 hot/high, >= 60 qualified/medium,
  otherwise nurture/low.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .time import parse_utc_datetime, require_utc_timestamp, to_iso_utc

QUALIFIED_SCORE = 60
HOT_SCORE = 80


class LeadChannel(str, Enum):
    CONTACT = "contact"
    BOOKING = "booking"
    ANALYSIS = "analysis"


class LeadStage(str, Enum):
    HOT = "hot"
    QUALIFIED = "qualified"
    NURTURE = "nurture"


class LeadPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NextActionType(str, Enum):
    BOOKING_CONFIRMATION = "booking_confirmation"
    SAME_DAY_DISCOVERY = "same_day_discovery"
    SCOPE_FOLLOWUP = "scope_followup"
    NURTURE_SEQUENCE = "nurture_sequence"


@dataclass(frozen=True, slots=True)
class OpsDecision:
    """
    Derived operational decision for a lead (never stored on its own).

    Serialized into the lead record with the camelCase keys used by the
    persisted ledger and the CSV export.
    """

    score: int
    stage: LeadStage
    priority: LeadPriority
    next_action_at: datetime
    next_action_type: NextActionType
    owner: str

    def __post_init__(self) -> None:
        require_utc_timestamp("next_action_at", self.next_action_at)
        if not 0 <= self.score <= 100:
            raise ValueError("score must be within [0, 100]")

    def to_fields(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "stage": self.stage.value,
            "priority": self.priority.value,
            "nextActionAt": to_iso_utc(self.next_action_at),
            "nextActionType": self.next_action_type.value,
            "owner": self.owner,
        }


@dataclass(frozen=True, slots=True)
class Lead:
    """
    Persisted lead record.

    fields holds the flat enriched record (form payload, ops decision,
    attribution snapshot and type) exactly as stored, minus the system fields
    id and createdAt which are exposed as lead_id and created_at.
    """

    lead_id: str
    created_at: datetime
    fields: Mapping[str, Any]

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        if not self.lead_id:
            raise ValueError("lead_id must be a non-empty string")
        # Freeze the mapping so the record cannot be edited after it is written.
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def type(self) -> str:
        return str(self.fields.get("type") or "")

    @property
    def score(self) -> float:
        """Numeric score; non-numeric stored values count as 0."""

        return coerce_number(self.fields.get("score"))

    @property
    def stage(self) -> str:
        return str(self.fields.get("stage") or "")

    def get(self, key: str, default: Any = None) -> Any:
        if key == "id":
            return self.lead_id
        if key == "createdAt":
            return to_iso_utc(self.created_at)
        return self.fields.get(key, default)

    def to_record(self) -> dict[str, Any]:
        """Flat JSON-ready record; system fields take precedence."""

        record: dict[str, Any] = {"id": self.lead_id, "createdAt": to_iso_utc(self.created_at)}
        for key, value in self.fields.items():
            if key not in record:
                record[key] = value
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["Lead"]:
        """Rebuild a Lead from a persisted row; returns None for malformed rows."""

        lead_id = record.get("id")
        created_at = parse_utc_datetime(record.get("createdAt"))
        if not isinstance(lead_id, str) or not lead_id or created_at is None:
            return None
        payload = {key: value for key, value in record.items() if key not in ("id", "createdAt")}
        return cls(lead_id=lead_id, created_at=created_at, fields=payload)


def coerce_number(value: Any) -> float:
    """Loose numeric coercion for stored values (bools and junk count as 0)."""

    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value if isinstance(value, (int, float)) else str(value).strip())
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_channel(value: str | LeadChannel) -> LeadChannel:
    """Resolve a channel name; raises ValueError for unknown channels."""

    if isinstance(value, LeadChannel):
        return value
    try:
        return LeadChannel(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown lead channel: {value!r}") from None


__all__ = [
    "HOT_SCORE",
    "Lead",
    "LeadChannel",
    "LeadPriority",
    "LeadStage",
    "NextActionType",
    "OpsDecision",
    "QUALIFIED_SCORE",
    "coerce_number",
    "parse_channel",
]
