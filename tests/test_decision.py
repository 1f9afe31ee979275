"""
Tests for `domain/decision.py`.

Covers contract rules:
- Stage and priority share cutoffs (>= 80 hot/high, >= 60 qualified/medium).
- Stage is monotonic in score.
- Booking leads always get booking_confirmation within 6 hours.
- Other channels get 8 / 24 / 72 hours by stage.
- A usable score already present in the payload is honored.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from domain.decision import compute_lead_ops, priority_for_score, stage_for_score
from domain.lead import LeadPriority, LeadStage, NextActionType

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "score, stage, priority",
    [
        (0, LeadStage.NURTURE, LeadPriority.LOW),
        (59, LeadStage.NURTURE, LeadPriority.LOW),
        (59.9, LeadStage.NURTURE, LeadPriority.LOW),
        (60, LeadStage.QUALIFIED, LeadPriority.MEDIUM),
        (79, LeadStage.QUALIFIED, LeadPriority.MEDIUM),
        (80, LeadStage.HOT, LeadPriority.HIGH),
        (100, LeadStage.HOT, LeadPriority.HIGH),
    ],
)
def test_stage_and_priority_boundaries(score: float, stage: LeadStage, priority: LeadPriority) -> None:
    """Verify score → stage/priority mapping at the cutoffs."""

    assert stage_for_score(score) == stage
    assert priority_for_score(score) == priority


def test_stage_is_monotonic_in_score() -> None:
    """Verify raising the score never moves the stage backward."""

    order = [LeadStage.NURTURE, LeadStage.QUALIFIED, LeadStage.HOT]
    ranks = [order.index(stage_for_score(score)) for score in range(0, 101)]

    assert ranks == sorted(ranks)


def test_empty_booking_lead_gets_booking_confirmation_in_six_hours() -> None:
    """Verify {} on booking → 42, nurture, low, booking_confirmation at now + 6h."""

    ops = compute_lead_ops({}, "booking", now=NOW)

    assert ops.score == 42
    assert ops.stage == LeadStage.NURTURE
    assert ops.priority == LeadPriority.LOW
    assert ops.next_action_type == NextActionType.BOOKING_CONFIRMATION
    assert ops.next_action_at == NOW + timedelta(hours=6)


def test_hot_booking_lead_still_uses_booking_window() -> None:
    """Verify booking overrides the stage-based window and action."""

    payload = {"budget": "90000", "decision_role": "Founder", "urgency": "High"}
    ops = compute_lead_ops(payload, "booking", now=NOW)

    assert ops.stage == LeadStage.HOT
    assert ops.next_action_type == NextActionType.BOOKING_CONFIRMATION
    assert ops.next_action_at == NOW + timedelta(hours=6)


@pytest.mark.parametrize(
    "payload, lead_type, stage, action, hours",
    [
        (
            {"decision_role": "Kurucu", "urgency": "Yüksek", "budget": "85000"},
            "analysis",
            LeadStage.HOT,
            NextActionType.SAME_DAY_DISCOVERY,
            8,
        ),
        (
            {"budget": "80000", "company": "Acme", "phone": "555", "urgency": "Orta"},
            "contact",
            LeadStage.QUALIFIED,
            NextActionType.SCOPE_FOLLOWUP,
            24,
        ),
        ({}, "contact", LeadStage.NURTURE, NextActionType.NURTURE_SEQUENCE, 72),
        ({}, "analysis", LeadStage.NURTURE, NextActionType.NURTURE_SEQUENCE, 72),
    ],
)
def test_non_booking_followup_windows(payload, lead_type, stage, action, hours) -> None:
    """Verify stage-based next action and follow-up window for contact/analysis."""

    ops = compute_lead_ops(payload, lead_type, now=NOW)

    assert ops.stage == stage
    assert ops.next_action_type == action
    assert ops.next_action_at == NOW + timedelta(hours=hours)


def test_owner_defaults_and_override() -> None:
    """Verify the owner falls back to "Owner" when not supplied."""

    assert compute_lead_ops({}, "contact", now=NOW).owner == "Owner"
    assert compute_lead_ops({}, "contact", owner="Acme Studio", now=NOW).owner == "Acme Studio"


@pytest.mark.parametrize(
    "preset, expected",
    [
        ("75", 75),
        (64.6, 65),
        (150, 100),
        (-20, 0),
        (0, 18),
        ("", 18),
        ("n/a", 18),
        (True, 18),
    ],
)
def test_preset_score_is_honored_when_usable(preset, expected: int) -> None:
    """Verify a numeric non-zero payload score wins over computation (rounded, clamped)."""

    ops = compute_lead_ops({"score": preset}, "contact", now=NOW)

    assert ops.score == expected


def test_to_fields_uses_persisted_keys() -> None:
    """Verify the camelCase keys and ISO timestamp written into lead records."""

    fields = compute_lead_ops({}, "booking", owner="Acme", now=NOW).to_fields()

    assert fields == {
        "score": 42,
        "stage": "nurture",
        "priority": "low",
        "nextActionAt": "2025-01-01T18:00:00.000Z",
        "nextActionType": "booking_confirmation",
        "owner": "Acme",
    }


def test_compute_lead_ops_requires_utc_now() -> None:
    """Verify naive reference times are rejected."""

    with pytest.raises(ValueError):
        compute_lead_ops({}, "contact", now=datetime(2025, 1, 1, 12, 0, 0))
