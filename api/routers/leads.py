"""
Leads API Endpoints.

Endpoint for capturing form submissions as scored pipeline leads.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import (
    get_dispatcher,
    get_settings,
    get_signal,
    get_store,
    get_telemetry,
    to_session_context,
)
from api.models import ErrorResponse, LeadSubmissionRequest, LeadSubmissionResponse
from config.settings import Settings
from domain.lead import parse_channel
from repositories.bounded_store import BoundedLocalStore
from services.lead_capture_service import (
    STATUS_ACCEPTED,
    STATUS_COOLDOWN,
    STATUS_IGNORED,
    NotificationDispatcher,
    submit_lead,
)
from services.signals import PipelineSignal
from services.telemetry_service import TelemetrySink

router = APIRouter()


@router.post(
    "/leads/{channel}",
    response_model=LeadSubmissionResponse,
    summary="Submit Lead",
    description="Score, enrich and store a form submission from the contact, booking or analysis form.",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown lead channel"},
        429: {"model": ErrorResponse, "description": "Channel cooldown still active"},
        500: {"model": ErrorResponse, "description": "Lead capture failed"},
    },
)
def submit_channel_lead(
    channel: str,
    request: LeadSubmissionRequest,
    settings: Settings = Depends(get_settings),
    store: BoundedLocalStore = Depends(get_store),
    telemetry: TelemetrySink = Depends(get_telemetry),
    signal: PipelineSignal = Depends(get_signal),
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),
):
    """
    Capture a lead submitted through one of the site's forms.

    **Process:**
    1. Ignores honeypot submissions (answered as accepted, nothing stored)
    2. Rejects submissions inside the channel's cooldown window (429)
    3. Scores the payload and derives stage, priority and next action
    4. Merges the visitor's attribution into the record
    5. Stores the lead and records funnel events

    **Example request:**
    ```json
    {
      "payload": {"name": "Ayşe", "email": "ayse@example.com", "budget": "85000"},
      "context": {"page_url": "/analysis?utm_source=google"}
    }
    ```
    """
    try:
        lead_channel = parse_channel(channel)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = submit_lead(
            request.payload,
            lead_channel,
            store,
            to_session_context(request.context, settings),
            telemetry,
            dispatcher=dispatcher,
            signal=signal,
        )
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to capture lead: {str(e)}"
        )

    if result.status == STATUS_COOLDOWN:
        raise HTTPException(
            status_code=429,
            detail=f"Please wait {result.retry_after_seconds} seconds before submitting again.",
            headers={"Retry-After": str(result.retry_after_seconds)},
        )

    lead = result.lead
    if result.status == STATUS_IGNORED:
        # Bots get the same answer as a real submission.
        return LeadSubmissionResponse(status=STATUS_ACCEPTED, notification=result.notification)
    if lead is None:
        return LeadSubmissionResponse(status=result.status, notification=result.notification)

    return LeadSubmissionResponse(
        status=result.status,
        lead_id=lead.lead_id,
        score=int(lead.score),
        stage=lead.stage,
        priority=lead.get("priority"),
        next_action_type=lead.get("nextActionType"),
        next_action_at=lead.get("nextActionAt"),
        notification=result.notification,
    )
