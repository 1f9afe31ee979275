"""
Lead repository (persistence).

This module provides *only* persistence operations for the Lead ledger.
No business rules (scoring, stages, identity generation) belong here.
"""

from __future__ import annotations

import logging
from typing import List

from domain.lead import Lead
from repositories.bounded_store import BoundedLocalStore, StoreResult

logger = logging.getLogger(__name__)

# Storage key and retention for the lead ledger.
# Keep this aligned with exported dashboards reading the same key.
LEAD_STORE_KEY: str = "pipelineLeads_v1"
LEAD_CAPACITY: int = 400


def insert_lead(store: BoundedLocalStore, lead: Lead) -> StoreResult:
    """
    Append a Lead to the ledger, evicting the oldest beyond LEAD_CAPACITY.

    Never raises; the StoreResult reports whether the write landed.
    """

    return store.append(LEAD_STORE_KEY, lead.to_record(), capacity=LEAD_CAPACITY)


def list_lead_records(store: BoundedLocalStore) -> List[dict]:
    """Raw persisted rows, oldest first. Non-object rows are dropped."""

    return [row for row in store.read_sequence(LEAD_STORE_KEY) if isinstance(row, dict)]


def list_leads(store: BoundedLocalStore) -> List[Lead]:
    """
    List all stored Leads, oldest first.

    Rows that cannot be rebuilt (missing id or createdAt) are skipped.
    """

    leads: List[Lead] = []
    skipped = 0
    for row in list_lead_records(store):
        lead = Lead.from_record(row)
        if lead is None:
            skipped += 1
            continue
        leads.append(lead)

    if skipped:
        logger.warning(
            "Skipped malformed lead rows",
            extra={"storage_key": LEAD_STORE_KEY, "skipped_rows": skipped},
        )
    return leads


def clear_leads(store: BoundedLocalStore) -> StoreResult:
    return store.clear(LEAD_STORE_KEY)


__all__ = [
    "LEAD_CAPACITY",
    "LEAD_STORE_KEY",
    "clear_leads",
    "insert_lead",
    "list_lead_records",
    "list_leads",
]
