"""
Events API Endpoints.

Funnel telemetry from the site's client script (CTA clicks, variant views, ...).
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_telemetry
from api.models import TrackEventRequest, TrackEventResponse
from services.telemetry_service import TelemetrySink

router = APIRouter()


@router.post(
    "/events",
    response_model=TrackEventResponse,
    summary="Track Event",
    description="Record a funnel event. Tracking never fails the caller; check `stored` for the outcome."
)
def track_event(request: TrackEventRequest, telemetry: TelemetrySink = Depends(get_telemetry)):
    result = telemetry.track_event(request.event, request.params)
    return TrackEventResponse(
        event=result.event.event,
        ts=result.event.ts,
        forwarded=result.forwarded,
        stored=result.stored,
    )
