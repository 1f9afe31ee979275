"""
Tests for `services/enrichment_service.py`, `services/lead_ledger.py` and
`repositories/lead_repository.py`.

Covers contract rules:
- Enrichment layers payload, ops decision, attribution and type, later layers winning.
- The ledger keeps at most 400 leads, evicting the oldest.
- Every saved lead gets a "lead_<ms>_<suffix>" id and a UTC creation time.
- The change signal fires only for writes that landed.
"""

from __future__ import annotations

import re

from domain.session import SessionContext
from repositories.lead_repository import LEAD_CAPACITY, LEAD_STORE_KEY, list_lead_records, list_leads
from services.attribution_service import capture_attribution
from services.enrichment_service import enrich_lead_payload
from services.lead_ledger import generate_lead_id, save_lead
from services.signals import PIPELINE_UPDATED, PipelineSignal

LEAD_ID_PATTERN = re.compile(r"^lead_\d+_[0-9a-z]{6}$")


def test_enrichment_merges_ops_and_attribution(store, clock) -> None:
    """Verify the enriched record carries score, stage, next action, attribution and type."""

    context = SessionContext(page_url="/book?utm_source=google", owner_name="Acme Studio", clock=clock)
    capture_attribution(store, context)

    enriched = enrich_lead_payload({"name": "Ayşe", "email": "a@example.com"}, "booking", store, context)

    assert enriched["name"] == "Ayşe"
    assert enriched["score"] == 42
    assert enriched["stage"] == "nurture"
    assert enriched["priority"] == "low"
    assert enriched["nextActionType"] == "booking_confirmation"
    assert enriched["nextActionAt"] == "2025-03-14T15:30:00.000Z"
    assert enriched["owner"] == "Acme Studio"
    assert enriched["utm_source"] == "google"
    assert enriched["device"] == "desktop"
    assert enriched["type"] == "booking"


def test_enrichment_later_layers_win(store, context) -> None:
    payload = {"stage": "hot", "device": "toaster", "type": "contact", "score": 0}

    enriched = enrich_lead_payload(payload, "analysis", store, context)

    assert enriched["stage"] == "nurture"
    assert enriched["device"] == "desktop"
    assert enriched["type"] == "analysis"


def test_enrichment_reads_but_does_not_write(surface, store, context) -> None:
    enrich_lead_payload({}, "contact", store, context)

    assert surface.keys() == []


def test_save_lead_assigns_identity_and_timestamp(store, context, clock) -> None:
    result = save_lead({"type": "contact", "score": 18}, store, context)

    assert result.stored is True
    assert LEAD_ID_PATTERN.match(result.lead.lead_id)
    assert result.lead.lead_id.startswith("lead_1741944600000_")
    assert result.lead.created_at == clock()
    assert list_lead_records(store)[0]["createdAt"] == "2025-03-14T09:30:00.000Z"


def test_generate_lead_id_format(clock) -> None:
    ids = {generate_lead_id(clock()) for _ in range(20)}

    assert all(LEAD_ID_PATTERN.match(lead_id) for lead_id in ids)
    assert len(ids) > 1


def test_ledger_keeps_newest_400_leads(store, context, clock) -> None:
    """Verify appending 405 leads leaves exactly 400 with the 5 oldest evicted."""

    for i in range(405):
        save_lead({"name": f"lead-{i}", "type": "contact"}, store, context)
        clock.advance(seconds=1)

    names = [lead.get("name") for lead in list_leads(store)]

    assert len(names) == LEAD_CAPACITY == 400
    assert names[0] == "lead-5"
    assert names[-1] == "lead-404"
    assert not {f"lead-{i}" for i in range(5)} & set(names)


def test_save_lead_emits_change_signal(store, context) -> None:
    signal = PipelineSignal()
    received = []
    signal.connect(received.append)

    save_lead({"type": "contact"}, store, context, signal)

    assert received == [PIPELINE_UPDATED]


def test_failed_write_reports_error_and_stays_silent(write_failing_store, context) -> None:
    """Verify a storage failure is reported and no change signal fires."""

    signal = PipelineSignal()
    received = []
    signal.connect(received.append)

    result = save_lead({"type": "contact"}, write_failing_store, context, signal)

    assert result.stored is False
    assert "quota exceeded" in result.error
    assert received == []


def test_failing_listener_does_not_break_save(store, context) -> None:
    signal = PipelineSignal()
    received = []

    def broken(reason: str) -> None:
        raise RuntimeError("dashboard crashed")

    signal.connect(broken)
    signal.connect(received.append)

    result = save_lead({"type": "contact"}, store, context, signal)

    assert result.stored is True
    assert received == [PIPELINE_UPDATED]


def test_list_leads_skips_malformed_rows(surface, store) -> None:
    surface.set_item(
        LEAD_STORE_KEY,
        '[{"id": "lead_1", "createdAt": "2025-01-01T00:00:00.000Z"}, {"name": "orphan"}, "junk"]',
    )

    leads = list_leads(store)

    assert [lead.lead_id for lead in leads] == ["lead_1"]
