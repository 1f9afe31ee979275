"""
Domain: Lead operations decision (pure apart from the supplied clock).

Rules:
- stage: score >= 80 hot, score >= 60 qualified, otherwise nurture.
- priority mirrors stage: high / medium / low.
- follow-up window: 6 hours for booking leads; otherwise 8 / 24 / 72 hours for
  hot / qualified / nurture.
- next action type: booking leads always get booking_confirmation; other
  channels follow the stage (same_day_discovery / scope_followup /
  nurture_sequence).
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from .lead import (
    HOT_SCORE,
    QUALIFIED_SCORE,
    LeadChannel,
    LeadPriority,
    LeadStage,
    NextActionType,
    OpsDecision,
    coerce_number,
    parse_channel,
)
from .scoring import score_lead
from .session import DEFAULT_OWNER_NAME
from .time import require_utc_timestamp, utc_now

BOOKING_FOLLOWUP_HOURS = 6

STAGE_FOLLOWUP_HOURS = {
    LeadStage.HOT: 8,
    LeadStage.QUALIFIED: 24,
    LeadStage.NURTURE: 72,
}

STAGE_NEXT_ACTION = {
    LeadStage.HOT: NextActionType.SAME_DAY_DISCOVERY,
    LeadStage.QUALIFIED: NextActionType.SCOPE_FOLLOWUP,
    LeadStage.NURTURE: NextActionType.NURTURE_SEQUENCE,
}


def stage_for_score(score: float) -> LeadStage:
    if score >= HOT_SCORE:
        return LeadStage.HOT
    if score >= QUALIFIED_SCORE:
        return LeadStage.QUALIFIED
    return LeadStage.NURTURE


def priority_for_score(score: float) -> LeadPriority:
    if score >= HOT_SCORE:
        return LeadPriority.HIGH
    if score >= QUALIFIED_SCORE:
        return LeadPriority.MEDIUM
    return LeadPriority.LOW


def followup_hours(channel: LeadChannel, stage: LeadStage) -> int:
    if channel is LeadChannel.BOOKING:
        return BOOKING_FOLLOWUP_HOURS
    return STAGE_FOLLOWUP_HOURS[stage]


def next_action_type_for(channel: LeadChannel, stage: LeadStage) -> NextActionType:
    if channel is LeadChannel.BOOKING:
        return NextActionType.BOOKING_CONFIRMATION
    return STAGE_NEXT_ACTION[stage]


def _preset_score(payload: Mapping[str, Any]) -> Optional[int]:
    """
    A score already carried by the payload, if it is a usable number.

    Missing, empty and zero values mean "not scored yet"; stored values are
    rounded and clamped into [0, 100].
    """

    raw = payload.get("score")
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    number = coerce_number(raw)
    if not number:
        return None
    return max(0, min(100, int(round(number))))


def compute_lead_ops(
    payload: Mapping[str, Any],
    lead_type: str | LeadChannel = LeadChannel.CONTACT,
    owner: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OpsDecision:
    """
    Derive score, stage, priority and the next scheduled action for a lead.

    Args:
        payload: Raw form payload (a preset "score" is honored)
        lead_type: Channel that produced the lead
        owner: Brand/owner name; falls back to "Owner"
        now: Reference time (UTC); defaults to the wall clock

    Example:
        ops = compute_lead_ops({}, "booking")
        # ops.score == 42, ops.next_action_type == NextActionType.BOOKING_CONFIRMATION
    """

    channel = parse_channel(lead_type)
    reference = now if now is not None else utc_now()
    require_utc_timestamp("now", reference)

    score = _preset_score(payload)
    if score is None:
        score = score_lead(payload, channel)

    stage = stage_for_score(score)

    return OpsDecision(
        score=score,
        stage=stage,
        priority=priority_for_score(score),
        next_action_at=reference + timedelta(hours=followup_hours(channel, stage)),
        next_action_type=next_action_type_for(channel, stage),
        owner=owner or DEFAULT_OWNER_NAME,
    )


__all__ = [
    "compute_lead_ops",
    "followup_hours",
    "next_action_type_for",
    "priority_for_score",
    "stage_for_score",
]
