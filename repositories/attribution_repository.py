"""
Attribution repository (persistence).

The attribution record is a singleton stored as a one-element sequence under
ATTRIBUTION_STORE_KEY. Only the attribution service writes it.
"""

from __future__ import annotations

from typing import Optional

from domain.attribution import AttributionRecord
from repositories.bounded_store import BoundedLocalStore, StoreResult

ATTRIBUTION_STORE_KEY: str = "leadAttribution_v1"


def get_stored_attribution(store: BoundedLocalStore) -> Optional[dict]:
    """
    The raw stored attribution object.

    Returns None when nothing was captured yet or the slot holds something
    other than an object.
    """

    rows = store.read_sequence(ATTRIBUTION_STORE_KEY)
    if not rows or not isinstance(rows[0], dict):
        return None
    return rows[0]


def save_attribution(store: BoundedLocalStore, record: AttributionRecord) -> StoreResult:
    """Overwrite the singleton slot. Empty fields are not persisted."""

    return store.write(ATTRIBUTION_STORE_KEY, [record.non_empty()])


def clear_attribution(store: BoundedLocalStore) -> StoreResult:
    return store.clear(ATTRIBUTION_STORE_KEY)


__all__ = [
    "ATTRIBUTION_STORE_KEY",
    "clear_attribution",
    "get_stored_attribution",
    "save_attribution",
]
