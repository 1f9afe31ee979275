"""
Domain: Acquisition attribution.

Contract excerpts implemented here:
- One AttributionRecord exists per visitor (singleton slot).
- Merging is sticky: an incoming capture overwrites a stored field only when it
  supplies a non-empty value. Empty values never erase stored ones.
- first_seen_at is set on the first capture and never overwritten.
- last_seen_at is refreshed on every capture.
- Device class is derived from viewport width:
  - MOBILE: width <= 767
  - TABLET: 768 <= width <= 1199
  - DESKTOP: width >= 1200 (or unknown)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional

CAMPAIGN_PARAMS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "gclid",
    "fbclid",
)


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"

    @staticmethod
    def for_viewport_width(width: Optional[int]) -> "DeviceType":
        if width is None:
            return DeviceType.DESKTOP
        if width <= 767:
            return DeviceType.MOBILE
        if width <= 1199:
            return DeviceType.TABLET
        return DeviceType.DESKTOP


@dataclass(frozen=True, slots=True)
class AttributionRecord:
    """
    How the visitor reached the site.

    Every field is a string; '' means "not known". Timestamps are kept in their
    persisted ISO form since the record is stored and exported verbatim.
    """

    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_content: str = ""
    utm_term: str = ""
    gclid: str = ""
    fbclid: str = ""
    referrer: str = ""
    landing_page: str = ""
    locale: str = ""
    timezone: str = ""
    device: str = ""
    first_seen_at: str = ""
    last_seen_at: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AttributionRecord":
        """Build a record from persisted data, ignoring unknown keys."""

        known = {f.name for f in fields(cls)}
        values = {
            key: "" if value is None else str(value)
            for key, value in data.items()
            if key in known
        }
        return cls(**values)

    def merged_with(self, patch: "AttributionRecord") -> "AttributionRecord":
        """
        Apply a capture over this record using the sticky merge rule.

        first_seen_at is never replaced once set; when still empty it takes the
        patch's last_seen_at (the capture time).
        """

        changes = {}
        for f in fields(self):
            if f.name == "first_seen_at":
                continue
            incoming = getattr(patch, f.name)
            if incoming:
                changes[f.name] = incoming

        merged = replace(self, **changes)
        if not merged.first_seen_at:
            merged = replace(merged, first_seen_at=patch.first_seen_at or patch.last_seen_at)
        return merged

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def non_empty(self) -> dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value}


__all__ = ["AttributionRecord", "CAMPAIGN_PARAMS", "DeviceType"]
