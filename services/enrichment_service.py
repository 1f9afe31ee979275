"""
Lead enrichment.

Composes the ops decision and the attribution snapshot into a persist-ready
lead record. Reads attribution, writes nothing.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from domain.decision import compute_lead_ops
from domain.lead import LeadChannel, parse_channel
from domain.session import SessionContext
from repositories.bounded_store import BoundedLocalStore
from services.attribution_service import get_attribution


def enrich_lead_payload(
    payload: Mapping[str, Any],
    lead_type: str | LeadChannel,
    store: BoundedLocalStore,
    context: SessionContext,
) -> Dict[str, Any]:
    """
    Return {**payload, **ops, **attribution, "type": channel}.

    Later layers win on key collisions: ops fields override payload fields,
    attribution fields override both, and type is always the channel.
    """

    channel = parse_channel(lead_type)
    ops = compute_lead_ops(payload, channel, owner=context.owner_name, now=context.now())

    enriched: Dict[str, Any] = dict(payload)
    enriched.update(ops.to_fields())
    enriched.update(get_attribution(store, context))
    enriched["type"] = channel.value
    return enriched


__all__ = ["enrich_lead_payload"]
