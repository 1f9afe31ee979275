"""
Sessions API Endpoints.

Page-load attribution capture and attribution lookup.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_settings, get_store, get_telemetry, to_session_context
from api.models import AttributionResponse, SessionContextModel
from config.settings import Settings
from repositories.bounded_store import BoundedLocalStore
from services.attribution_service import get_attribution
from services.lead_capture_service import start_session
from services.telemetry_service import TelemetrySink

router = APIRouter()


@router.post(
    "/sessions",
    response_model=AttributionResponse,
    summary="Start Session",
    description="Capture attribution for a page load and record a session_start event."
)
def create_session(
    context: SessionContextModel,
    settings: Settings = Depends(get_settings),
    store: BoundedLocalStore = Depends(get_store),
    telemetry: TelemetrySink = Depends(get_telemetry),
):
    """
    Capture attribution for the visitor's current page.

    **How it works:**
    1. Reads campaign parameters (utm_*, gclid, fbclid) from `page_url`
    2. Merges them into the stored attribution record (empty values never erase)
    3. Records a `session_start` funnel event
    """
    try:
        attribution = start_session(store, to_session_context(context, settings), telemetry)
        return AttributionResponse(attribution=attribution)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to start session: {str(e)}"
        )


@router.get(
    "/attribution",
    response_model=AttributionResponse,
    summary="Get Attribution",
    description="Stored attribution merged over values computed from the given page context."
)
def read_attribution(
    page_url: str = Query("/"),
    locale: str = Query(""),
    timezone: str = Query(""),
    viewport_width: Optional[int] = Query(None, ge=0),
    settings: Settings = Depends(get_settings),
    store: BoundedLocalStore = Depends(get_store),
):
    context = SessionContextModel(
        page_url=page_url,
        locale=locale,
        timezone=timezone,
        viewport_width=viewport_width,
    )
    return AttributionResponse(
        attribution=get_attribution(store, to_session_context(context, settings))
    )
