"""
Attribution tracker.

Captures how the visitor arrived (campaign parameters, referrer, landing page,
locale, timezone, device) and keeps one sticky-merged record per visitor.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from domain.attribution import CAMPAIGN_PARAMS, AttributionRecord, DeviceType
from domain.session import SessionContext
from domain.time import to_iso_utc
from repositories.attribution_repository import get_stored_attribution, save_attribution
from repositories.bounded_store import BoundedLocalStore

logger = logging.getLogger(__name__)


def _context_fallback(context: SessionContext) -> Dict[str, str]:
    return {
        "landing_page": context.landing_page,
        "locale": context.locale,
        "timezone": context.timezone,
        "device": DeviceType.for_viewport_width(context.viewport_width).value,
    }


def build_capture_patch(context: SessionContext) -> AttributionRecord:
    """The candidate record for one page load (before merging)."""

    params = context.query_params()
    now = to_iso_utc(context.now())
    return AttributionRecord(
        **{name: params.get(name, "") for name in CAMPAIGN_PARAMS},
        referrer=context.referrer,
        last_seen_at=now,
        **_context_fallback(context),
    )


def capture_attribution(store: BoundedLocalStore, context: SessionContext) -> AttributionRecord:
    """
    Merge this page load's attribution into the stored singleton.

    Non-empty incoming values overwrite stored ones; empty values never erase.
    first_seen_at is written once. Storage failures are contained by the store;
    the merged record is returned either way.
    """

    patch = build_capture_patch(context)
    current = AttributionRecord.from_mapping(get_stored_attribution(store) or {})
    merged = current.merged_with(patch)

    result = save_attribution(store, merged)
    if not result.ok:
        logger.warning("Attribution not persisted", extra={"error": result.error})
    return merged


def get_attribution(store: BoundedLocalStore, context: SessionContext) -> Dict[str, Any]:
    """
    Stored attribution merged over values computed from the current context.

    Always contains landing_page, locale, timezone and device, even before the
    first capture.
    """

    attribution: Dict[str, Any] = _context_fallback(context)
    stored = get_stored_attribution(store)
    if stored:
        attribution.update(stored)
    return attribution


__all__ = ["build_capture_patch", "capture_attribution", "get_attribution"]
