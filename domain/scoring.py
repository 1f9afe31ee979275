"""
Domain: Lead scoring (pure).

Maps a raw form payload and its channel to an integer score in [0, 100].

Scoring rules:
- Base score 18.
- Channel: booking +24, analysis +16, contact +0.
- Budget (largest tier met by either field, highest tier checked first):
  - budget_range max >= 750,000 or budget max >= 80,000 -> +26
  - budget_range max >= 300,000 or budget max >= 40,000 -> +18
  - budget_range max >= 100,000 or budget max >= 20,000 -> +10
- Timeline (folded timeline_pref contains): "0-30" +16, "31-60" +11, "61-90" +7.
- Decision role: founder/partner/c-level/executive +16, else manager +10.
- Urgency: high +10, else medium +6.
- Non-blank company +6, non-blank phone +5.
- Result clamped to [0, 100].

Free-text fields are folded before matching so Turkish and English spellings
(with or without diacritics, with or without mis-decoded UTF-8) match the same
keywords.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from .lead import LeadChannel, parse_channel

BASE_SCORE = 18

CHANNEL_BONUS = {
    LeadChannel.BOOKING: 24,
    LeadChannel.ANALYSIS: 16,
    LeadChannel.CONTACT: 0,
}

# (budget_range threshold, budget threshold, bonus), highest tier first.
BUDGET_TIERS = (
    (750_000, 80_000, 26),
    (300_000, 40_000, 18),
    (100_000, 20_000, 10),
)

TIMELINE_BONUSES = (
    ("0-30", 16),
    ("31-60", 11),
    ("61-90", 7),
)

SENIOR_ROLE_TOKENS = ("kurucu", "ortak", "c-level", "executive", "founder", "partner")
MANAGER_ROLE_TOKENS = ("yonetici", "manager")
HIGH_URGENCY_TOKENS = ("yuksek", "high")
MEDIUM_URGENCY_TOKENS = ("orta", "medium")

_TURKISH_FOLDS = str.maketrans({"ı": "i", "ğ": "g", "ş": "s", "ç": "c", "ö": "o", "ü": "u"})
_WHITESPACE = re.compile(r"\s+")
_BUDGET_SEPARATORS = re.compile("[-–—+]")
_NON_DIGITS = re.compile(r"\D", re.ASCII)


def repair_mojibake(value: Any) -> str:
    """
    Undo UTF-8 text that was mis-decoded as Latin-1 ("YÃ¼ksek" -> "Yüksek").

    The repair must never make data worse: when the string cannot be
    reinterpreted, or the result holds replacement characters, the original is
    returned unchanged.
    """

    text = "" if value is None else str(value)
    try:
        repaired = text.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text
    return text if "\ufffd" in repaired else repaired


def normalize_text(value: Any) -> str:
    return _WHITESPACE.sub(" ", "" if value is None else str(value)).strip()


def fold_lead_value(value: Any) -> str:
    """Repair, collapse whitespace, lowercase and strip Turkish diacritics."""

    return normalize_text(repair_mojibake(value)).lower().translate(_TURKISH_FOLDS)


def extract_budget_max(value: Any) -> int:
    """
    Largest positive number in a budget string such as "300.000-750.000 TL".

    Tokens are split on hyphen, en dash, em dash and plus; every non-digit is
    stripped from a token. Empty, non-positive and non-finite tokens (too long
    to be a float) are dropped. Returns 0 when nothing usable remains.
    """

    numbers = []
    for part in _BUDGET_SEPARATORS.split("" if value is None else str(value)):
        digits = _NON_DIGITS.sub("", part)
        if not digits or not math.isfinite(float(digits)):
            continue
        number = int(digits)
        if number > 0:
            numbers.append(number)
    return max(numbers) if numbers else 0


def _budget_bonus(payload: Mapping[str, Any]) -> int:
    range_max = extract_budget_max(payload.get("budget_range"))
    budget_max = extract_budget_max(payload.get("budget"))
    for range_threshold, budget_threshold, bonus in BUDGET_TIERS:
        if range_max >= range_threshold or budget_max >= budget_threshold:
            return bonus
    return 0


def _contains_any(text: str, tokens: tuple[str, ...]) -> bool:
    return any(token in text for token in tokens)


def _is_filled(value: Any) -> bool:
    return bool(value) and bool(str(value).strip())


def score_lead(payload: Mapping[str, Any], lead_type: str | LeadChannel = LeadChannel.CONTACT) -> int:
    """
    Score a lead payload for the given channel.

    Pure and deterministic: the same payload and channel always produce the
    same score.
    """

    channel = parse_channel(lead_type)

    def folded(key: str) -> str:
        return fold_lead_value(payload.get(key) or "")

    score = BASE_SCORE + CHANNEL_BONUS[channel]
    score += _budget_bonus(payload)

    timeline = folded("timeline_pref")
    for token, bonus in TIMELINE_BONUSES:
        if token in timeline:
            score += bonus
            break

    role = folded("decision_role")
    if _contains_any(role, SENIOR_ROLE_TOKENS):
        score += 16
    elif _contains_any(role, MANAGER_ROLE_TOKENS):
        score += 10

    urgency = folded("urgency")
    if _contains_any(urgency, HIGH_URGENCY_TOKENS):
        score += 10
    elif _contains_any(urgency, MEDIUM_URGENCY_TOKENS):
        score += 6

    if _is_filled(payload.get("company")):
        score += 6
    if _is_filled(payload.get("phone")):
        score += 5

    return max(0, min(100, score))


__all__ = [
    "BASE_SCORE",
    "BUDGET_TIERS",
    "extract_budget_max",
    "fold_lead_value",
    "normalize_text",
    "repair_mojibake",
    "score_lead",
]
