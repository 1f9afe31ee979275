"""
Lead ledger service.

The sole write path for leads: assigns identity and creation time, appends to
the bounded ledger and notifies listeners. Leads are never updated or deleted
individually; only a full pipeline reset removes them.

Identity:
- lead_id = "lead_<epoch milliseconds>_<6 random base36 characters>".
- Uniqueness is probabilistic, not guaranteed: two saves in the same
  millisecond collide with probability 1 / 36**6. No collision check is made.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from domain.lead import Lead
from domain.session import SessionContext
from domain.time import to_epoch_ms
from repositories.bounded_store import BoundedLocalStore
from repositories.lead_repository import insert_lead
from services.signals import PIPELINE_UPDATED, PipelineSignal

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 6


@dataclass(frozen=True, slots=True)
class LeadSaveResult:
    """
    Result of saving a lead.

    lead: The record including generated id and created_at
    stored: True if the ledger write reached storage
    error: Storage failure description (None when stored)
    """

    lead: Lead
    stored: bool
    error: Optional[str] = None


def generate_lead_id(created_at: datetime) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"lead_{to_epoch_ms(created_at)}_{suffix}"


def save_lead(
    fields: Mapping[str, Any],
    store: BoundedLocalStore,
    context: SessionContext,
    signal: Optional[PipelineSignal] = None,
) -> LeadSaveResult:
    """
    Persist an enriched lead.

    The change signal fires only when the write landed.

    Example:
        enriched = enrich_lead_payload(payload, "contact", store, context)
        result = save_lead(enriched, store, context, signal)
        result.lead.lead_id  # 'lead_1735732800000_k3j9x0'
    """

    created_at = context.now()
    lead = Lead(lead_id=generate_lead_id(created_at), created_at=created_at, fields=fields)

    result = insert_lead(store, lead)
    if not result.ok:
        logger.warning(
            "Lead not persisted",
            extra={"lead_id": lead.lead_id, "error": result.error},
        )
        return LeadSaveResult(lead=lead, stored=False, error=result.error)

    logger.info(
        "Lead saved",
        extra={"lead_id": lead.lead_id, "lead_type": lead.type, "score": lead.score},
    )
    if signal is not None:
        signal.emit(PIPELINE_UPDATED)
    return LeadSaveResult(lead=lead, stored=True)


__all__ = ["LeadSaveResult", "generate_lead_id", "save_lead"]
