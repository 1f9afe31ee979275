"""
Pipeline API Endpoints.

KPIs, recent leads, CSV export and the destructive reset.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_signal, get_store, get_telemetry
from api.models import (
    ErrorResponse,
    KpiResponse,
    RecentLeadResponse,
    RecentLeadsResponse,
    ResetRequest,
    ResetResponse,
)
from repositories.bounded_store import BoundedLocalStore
from services.pipeline_service import (
    DEFAULT_RECENT_LIMIT,
    compute_kpis,
    display_language,
    empty_table_label,
    export_csv,
    list_recent,
    render_lead_row,
    reset_all,
)
from services.signals import PipelineSignal
from services.telemetry_service import TelemetrySink

router = APIRouter()


@router.get(
    "/pipeline/kpis",
    response_model=KpiResponse,
    summary="Pipeline KPIs",
    description="Lead count, qualified count (score >= 60), booking count and qualification rate."
)
def get_kpis(store: BoundedLocalStore = Depends(get_store)):
    kpis = compute_kpis(store)
    return KpiResponse(
        total=kpis.total,
        qualified_count=kpis.qualified_count,
        booking_count=kpis.booking_count,
        qualification_rate=kpis.qualification_rate,
    )


@router.get(
    "/pipeline/leads/recent",
    response_model=RecentLeadsResponse,
    summary="Recent Leads",
    description="Newest leads first, formatted for the dashboard table."
)
def get_recent_leads(
    limit: int = Query(DEFAULT_RECENT_LIMIT, ge=1, le=400),
    language: str = Query("en"),
    store: BoundedLocalStore = Depends(get_store),
):
    language = display_language(language)
    items = []
    for lead in list_recent(store, limit):
        row = render_lead_row(lead, language)
        items.append(RecentLeadResponse(
            lead_id=lead.lead_id,
            created_at=lead.created_at,
            created=row.created,
            channel=row.channel,
            name=row.name,
            score=row.score,
            stage=row.stage,
            next_action=row.next_action,
        ))

    return RecentLeadsResponse(
        items=items,
        empty_message=None if items else empty_table_label(language),
    )


@router.get(
    "/pipeline/export",
    summary="Download Leads CSV",
    description="CSV export of every stored lead. Returns 204 when there are no leads.",
    response_class=Response,
    responses={500: {"model": ErrorResponse, "description": "CSV generation failed"}},
)
def download_leads_csv(
    store: BoundedLocalStore = Depends(get_store),
    telemetry: TelemetrySink = Depends(get_telemetry),
):
    """
    Download the CRM export.

    **CSV Contents:**
    - 33 fixed columns (timestamps, stage, contact details, budget, attribution)
    - Header row followed by one quoted row per lead

    **Response:**
    CSV file download with filename: `crm-leads.csv`
    """
    try:
        export = export_csv(store, telemetry)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate CSV: {str(e)}"
        )

    if export is None:
        return Response(status_code=204)

    return Response(
        content=export.content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={export.filename}"
        }
    )


@router.post(
    "/pipeline/reset",
    response_model=ResetResponse,
    summary="Reset Pipeline",
    description="Irreversibly clear leads, events and attribution. Requires {\"confirm\": true}.",
    responses={400: {"model": ErrorResponse, "description": "Reset not confirmed"}},
)
def reset_pipeline(
    request: ResetRequest,
    store: BoundedLocalStore = Depends(get_store),
    telemetry: TelemetrySink = Depends(get_telemetry),
    signal: PipelineSignal = Depends(get_signal),
):
    if not request.confirm:
        raise HTTPException(
            status_code=400,
            detail="Reset is destructive; send {\"confirm\": true} to proceed."
        )

    result = reset_all(store, confirm=True, telemetry=telemetry, signal=signal)
    return ResetResponse(performed=result.performed, errors=result.errors)
