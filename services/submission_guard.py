"""
Submission guard: honeypot trap and per-channel submit cooldown.

Cooldowns are stored as epoch milliseconds under "submitCooldown:<channel>".
Storage problems never block a submission: an unreadable timestamp means
"no cooldown".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

from domain.lead import LeadChannel, parse_channel
from domain.time import to_epoch_ms
from repositories.bounded_store import BoundedLocalStore, StoreResult

COOLDOWN_KEY_PREFIX = "submitCooldown:"

COOLDOWN_MS = {
    LeadChannel.BOOKING: 12_000,
    LeadChannel.ANALYSIS: 12_000,
    LeadChannel.CONTACT: 10_000,
}

DEFAULT_TRAP_FIELDS = ("website_hp",)


def cooldown_key(channel: str | LeadChannel) -> str:
    return f"{COOLDOWN_KEY_PREFIX}{parse_channel(channel).value}"


def is_honeypot_triggered(
    payload: Mapping[str, Any],
    trap_fields: Iterable[str] = DEFAULT_TRAP_FIELDS,
) -> bool:
    """True when a hidden trap field was filled in (bots fill every input)."""

    return any(str(payload.get(name) or "").strip() for name in trap_fields)


def get_cooldown_left(
    store: BoundedLocalStore,
    channel: str | LeadChannel,
    now: datetime,
    wait_ms: int | None = None,
) -> int:
    """Milliseconds until the channel accepts another submission (0 = ready)."""

    channel = parse_channel(channel)
    wait = COOLDOWN_MS[channel] if wait_ms is None else wait_ms
    last = store.read(cooldown_key(channel), 0)
    if not last or last <= 0:
        return 0
    elapsed = to_epoch_ms(now) - int(last)
    return 0 if elapsed >= wait else wait - elapsed


def mark_cooldown(store: BoundedLocalStore, channel: str | LeadChannel, now: datetime) -> StoreResult:
    return store.write(cooldown_key(channel), to_epoch_ms(now))


__all__ = [
    "COOLDOWN_MS",
    "cooldown_key",
    "get_cooldown_left",
    "is_honeypot_triggered",
    "mark_cooldown",
]
