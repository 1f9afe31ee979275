"""
Lead capture flow.

Runs one form submission through the pipeline:
1. Honeypot check (bots are answered as accepted; nothing is stored)
2. Per-channel cooldown check
3. Enrichment (score, stage, next action, attribution)
4. Notification dispatch for booking/contact (best-effort)
5. Ledger write, then the cooldown mark and funnel telemetry

A lead is persisted locally even when every external integration fails.
Field validation is the form controller's job and is not repeated here.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from domain.lead import QUALIFIED_SCORE, Lead, LeadChannel, parse_channel
from domain.session import SessionContext
from repositories.bounded_store import BoundedLocalStore
from services.attribution_service import capture_attribution, get_attribution
from services.enrichment_service import enrich_lead_payload
from services.lead_ledger import save_lead
from services.signals import PipelineSignal
from services.submission_guard import get_cooldown_left, is_honeypot_triggered, mark_cooldown
from services.telemetry_service import TelemetrySink

logger = logging.getLogger(__name__)

STATUS_ACCEPTED = "accepted"
STATUS_IGNORED = "ignored"
STATUS_COOLDOWN = "cooldown"
STATUS_FAILED = "failed"

NOTIFY_SENT = "sent"
NOTIFY_PENDING = "pending"
NOTIFY_FAILED = "failed"
NOTIFY_SKIPPED = "skipped"

# Channels whose submissions trigger an email/notification to the owner.
NOTIFIED_CHANNELS = (LeadChannel.BOOKING, LeadChannel.CONTACT)


class NotificationDispatcher(Protocol):
    """
    External email/notification collaborator.

    Returns True when the notification was sent, False when dispatch is not
    configured yet (the lead is still captured).
    """

    def dispatch(self, lead_fields: Mapping[str, Any]) -> bool:
        ...


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """
    Outcome of a submission.

    status: accepted | ignored (honeypot) | cooldown | failed (local write failed)
    lead: The saved lead (accepted/failed only)
    notification: sent | pending | failed | skipped
    retry_after_seconds: Seconds to wait when status is cooldown
    """

    status: str
    lead: Optional[Lead] = None
    notification: str = NOTIFY_SKIPPED
    retry_after_seconds: int = 0


def _submit_params(channel: LeadChannel, enriched: Mapping[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if channel is LeadChannel.BOOKING:
        params.update(
            service=enriched.get("service") or "",
            budget_range=enriched.get("budget_range") or "",
            timeline_pref=enriched.get("timeline_pref") or "",
        )
    elif channel is LeadChannel.ANALYSIS:
        params.update(
            goal=enriched.get("goal") or "",
            budget=enriched.get("budget") or "",
        )
    params.update(
        score=enriched.get("score"),
        utm_source=enriched.get("utm_source") or "",
        utm_campaign=enriched.get("utm_campaign") or "",
    )
    return params


def _success_params(channel: LeadChannel, enriched: Mapping[str, Any], lead: Lead) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if channel is LeadChannel.BOOKING:
        params["service"] = enriched.get("service") or ""
    params.update(score=enriched.get("score"), qualified=lead.score >= QUALIFIED_SCORE)
    return params


def _dispatch(
    channel: LeadChannel,
    enriched: Mapping[str, Any],
    dispatcher: Optional[NotificationDispatcher],
    telemetry: TelemetrySink,
) -> str:
    if dispatcher is None or channel not in NOTIFIED_CHANNELS:
        return NOTIFY_SKIPPED
    try:
        sent = dispatcher.dispatch(enriched)
    except Exception as e:
        logger.warning(
            "Lead notification dispatch failed",
            extra={"lead_type": channel.value, "error": str(e)},
        )
        telemetry.track_event(f"{channel.value}_email_failed", {"reason": type(e).__name__})
        return NOTIFY_FAILED
    return NOTIFY_SENT if sent else NOTIFY_PENDING


def submit_lead(
    payload: Mapping[str, Any],
    channel: str | LeadChannel,
    store: BoundedLocalStore,
    context: SessionContext,
    telemetry: TelemetrySink,
    dispatcher: Optional[NotificationDispatcher] = None,
    signal: Optional[PipelineSignal] = None,
) -> SubmissionResult:
    """
    Capture one form submission.

    Raises:
        ValueError: If channel is not a known lead channel
    """

    channel = parse_channel(channel)

    if is_honeypot_triggered(payload):
        logger.info("Honeypot submission ignored", extra={"lead_type": channel.value})
        return SubmissionResult(status=STATUS_IGNORED)

    now = context.now()
    cooldown_ms = get_cooldown_left(store, channel, now)
    if cooldown_ms > 0:
        return SubmissionResult(
            status=STATUS_COOLDOWN,
            retry_after_seconds=math.ceil(cooldown_ms / 1000),
        )

    enriched = enrich_lead_payload(payload, channel, store, context)
    telemetry.track_event(f"{channel.value}_submit", _submit_params(channel, enriched))

    notification = _dispatch(channel, enriched, dispatcher, telemetry)

    saved = save_lead(enriched, store, context, signal)
    if not saved.stored:
        telemetry.track_event(f"{channel.value}_failed", {"reason": "storage"})
        return SubmissionResult(status=STATUS_FAILED, lead=saved.lead, notification=notification)

    # Cooldown starts only once the lead is stored.
    mark_cooldown(store, channel, now)

    telemetry.track_event(f"{channel.value}_success", _success_params(channel, enriched, saved.lead))
    return SubmissionResult(status=STATUS_ACCEPTED, lead=saved.lead, notification=notification)


def start_session(
    store: BoundedLocalStore,
    context: SessionContext,
    telemetry: TelemetrySink,
) -> Dict[str, Any]:
    """
    Page-load hook: capture attribution, then record session_start.

    Returns the attribution the rest of the session will see.
    """

    capture_attribution(store, context)
    attribution = get_attribution(store, context)
    telemetry.track_event(
        "session_start",
        {
            "path": context.path,
            "utm_source": attribution.get("utm_source") or "",
            "utm_campaign": attribution.get("utm_campaign") or "",
            "referrer": attribution.get("referrer") or "",
        },
    )
    return attribution


__all__ = [
    "NotificationDispatcher",
    "SubmissionResult",
    "start_session",
    "submit_lead",
]
