"""
Pipeline aggregator.

Read-side views over the lead ledger (KPIs, recent leads, CSV export) and the
destructive pipeline reset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from domain.decision import stage_for_score
from domain.lead import QUALIFIED_SCORE, Lead, LeadChannel
from domain.time import parse_utc_datetime
from repositories.attribution_repository import clear_attribution
from repositories.bounded_store import BoundedLocalStore
from repositories.lead_repository import clear_leads, list_leads
from repositories.telemetry_repository import clear_events
from services.csv_export_service import CsvExport, generate_csv_for_leads
from services.signals import PIPELINE_RESET, PipelineSignal
from services.telemetry_service import TelemetrySink

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 8


@dataclass(frozen=True, slots=True)
class PipelineKpis:
    total: int
    qualified_count: int
    booking_count: int
    qualification_rate: int  # whole percent


@dataclass(frozen=True, slots=True)
class ResetResult:
    """
    performed: False when the caller did not confirm
    errors: storage failures encountered while clearing
    """

    performed: bool
    errors: List[str]


def compute_kpis(store: BoundedLocalStore) -> PipelineKpis:
    leads = list_leads(store)
    total = len(leads)
    qualified = sum(1 for lead in leads if lead.score >= QUALIFIED_SCORE)
    bookings = sum(1 for lead in leads if lead.type == LeadChannel.BOOKING.value)

    rate = 0
    if total:
        ratio = Decimal(qualified) / Decimal(total) * 100
        rate = int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return PipelineKpis(
        total=total,
        qualified_count=qualified,
        booking_count=bookings,
        qualification_rate=rate,
    )


def list_recent(store: BoundedLocalStore, limit: int = DEFAULT_RECENT_LIMIT) -> List[Lead]:
    """
    Newest leads first, at most `limit`.

    Leads sharing a creation time keep their ledger order.
    """

    if limit <= 0:
        return []
    leads = list_leads(store)
    leads.sort(key=lambda lead: lead.created_at, reverse=True)
    return leads[:limit]


# ============================================================================
# Dashboard view
# ============================================================================

STAGE_LABELS = {
    "en": {"hot": "Hot", "qualified": "Qualified", "nurture": "Nurture"},
    "tr": {"hot": "Sıcak", "qualified": "Nitelikli", "nurture": "Takip"},
}

CHANNEL_LABELS = {
    "en": {"booking": "Booking", "analysis": "Analysis", "contact": "Contact"},
    "tr": {"booking": "Rezervasyon", "analysis": "Analiz", "contact": "İletişim"},
}

NEXT_ACTION_LABELS = {
    "en": {
        "booking_confirmation": "Booking confirmation",
        "same_day_discovery": "Same-day discovery call",
        "scope_followup": "Scope follow-up",
        "nurture_sequence": "Nurture sequence",
    },
    "tr": {
        "booking_confirmation": "Rezervasyon teyidi",
        "same_day_discovery": "Ayni gun kesif gorusmesi",
        "scope_followup": "Kapsam takip gorusmesi",
        "nurture_sequence": "Nurture takip akisi",
    },
}

EMPTY_LABELS = {
    "en": "No lead records yet.",
    "tr": "Henüz lead kaydı yok.",
}


@dataclass(frozen=True, slots=True)
class RecentLeadRow:
    created: str
    channel: str
    name: str
    score: int
    stage: str
    next_action: str


def display_language(language: str) -> str:
    return "en" if language == "en" else "tr"


def _date_label(value: Optional[datetime], language: str) -> str:
    if value is None:
        return "-"
    if language == "en":
        return value.strftime("%m/%d/%Y")
    return value.strftime("%d.%m.%Y")


def render_lead_row(lead: Lead, language: str) -> RecentLeadRow:
    score = int(lead.score)
    stage_key = (lead.stage or stage_for_score(score).value).lower()
    channel_key = lead.type.lower()

    next_action_date = _date_label(parse_utc_datetime(lead.get("nextActionAt")), language)
    next_action_type = str(lead.get("nextActionType") or "").lower()
    next_action_label = NEXT_ACTION_LABELS[language].get(next_action_type, "")
    if next_action_label and next_action_date != "-":
        next_action = f"{next_action_date} | {next_action_label}"
    else:
        next_action = next_action_date

    return RecentLeadRow(
        created=_date_label(lead.created_at, language),
        channel=CHANNEL_LABELS[language].get(channel_key, lead.type or "-"),
        name=str(lead.get("name") or lead.get("email") or "-"),
        score=score,
        stage=STAGE_LABELS[language].get(stage_key, STAGE_LABELS[language]["nurture"]),
        next_action=next_action,
    )


def render_recent(
    store: BoundedLocalStore,
    language: str = "en",
    limit: int = DEFAULT_RECENT_LIMIT,
) -> List[RecentLeadRow]:
    """Display rows for the recent-leads table in English ("en") or Turkish."""

    language = display_language(language)
    return [render_lead_row(lead, language) for lead in list_recent(store, limit)]


def empty_table_label(language: str) -> str:
    return EMPTY_LABELS[display_language(language)]


# ============================================================================
# Export and reset
# ============================================================================

def export_csv(
    store: BoundedLocalStore,
    telemetry: Optional[TelemetrySink] = None,
    neutralize_formulas: bool = False,
) -> Optional[CsvExport]:
    """
    Export every stored lead as CSV.

    Returns None (and tracks nothing) when the ledger is empty.
    """

    export = generate_csv_for_leads(list_leads(store), neutralize_formulas=neutralize_formulas)
    if export is None:
        return None

    logger.info("Lead export generated", extra={"row_count": export.row_count})
    if telemetry is not None:
        telemetry.track_event("crm_export", {"count": export.row_count})
    return export


def reset_all(
    store: BoundedLocalStore,
    confirm: bool,
    telemetry: Optional[TelemetrySink] = None,
    signal: Optional[PipelineSignal] = None,
) -> ResetResult:
    """
    Clear leads, telemetry and attribution in one operation.

    Destructive and irreversible; nothing happens unless confirm is True.
    The pipeline_clear event is recorded after the clear so it survives it.
    """

    if confirm is not True:
        return ResetResult(performed=False, errors=[])

    results = [clear_leads(store), clear_events(store), clear_attribution(store)]
    errors = [result.error or "unknown storage error" for result in results if not result.ok]

    logger.info("Pipeline reset", extra={"storage_errors": len(errors)})
    if telemetry is not None:
        telemetry.track_event("pipeline_clear")
    if signal is not None:
        signal.emit(PIPELINE_RESET)

    return ResetResult(performed=True, errors=errors)


__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "PipelineKpis",
    "RecentLeadRow",
    "ResetResult",
    "compute_kpis",
    "display_language",
    "empty_table_label",
    "export_csv",
    "list_recent",
    "render_lead_row",
    "render_recent",
    "reset_all",
]
