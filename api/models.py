"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Session Models
# ============================================================================

class SessionContextModel(BaseModel):
    """Visitor page/session context sent by the site's client script."""
    page_url: str = Field("/", description="Current page path or URL, including the query string")
    referrer: str = ""
    locale: str = ""
    timezone: str = ""
    viewport_width: Optional[int] = Field(None, ge=0, description="Viewport width in CSS pixels")
    language: str = Field("en", description="Active display language (en or tr)")

    class Config:
        json_schema_extra = {
            "example": {
                "page_url": "/?utm_source=google&utm_campaign=spring",
                "referrer": "https://www.google.com/",
                "locale": "tr-TR",
                "timezone": "Europe/Istanbul",
                "viewport_width": 1440,
                "language": "tr"
            }
        }


class AttributionResponse(BaseModel):
    """Current attribution for the visitor."""
    attribution: Dict[str, Any]


# ============================================================================
# Lead Models
# ============================================================================

class LeadSubmissionRequest(BaseModel):
    """A raw form submission plus the context it was made in."""
    payload: Dict[str, Any] = Field(default_factory=dict, description="Form fields as submitted")
    context: SessionContextModel = Field(default_factory=SessionContextModel)

    class Config:
        json_schema_extra = {
            "example": {
                "payload": {
                    "name": "Ayşe Yılmaz",
                    "email": "ayse@example.com",
                    "company": "Acme",
                    "budget_range": "300000-750000",
                    "timeline_pref": "0-30 gün",
                    "decision_role": "Kurucu / Ortak",
                    "urgency": "Yüksek"
                },
                "context": {"page_url": "/booking", "language": "tr"}
            }
        }


class LeadSubmissionResponse(BaseModel):
    """Response after a submission is processed."""
    status: str  # "accepted" or "failed"
    lead_id: Optional[str] = None
    score: Optional[int] = None
    stage: Optional[str] = None
    priority: Optional[str] = None
    next_action_type: Optional[str] = None
    next_action_at: Optional[str] = None
    notification: str


# ============================================================================
# Event Models
# ============================================================================

class TrackEventRequest(BaseModel):
    """Request to record a funnel event."""
    event: str = Field(..., min_length=1, description="Event name, e.g. cta_booking_click")
    params: Dict[str, Any] = Field(default_factory=dict)


class TrackEventResponse(BaseModel):
    event: str
    ts: datetime
    forwarded: bool
    stored: bool


# ============================================================================
# Pipeline Models
# ============================================================================

class KpiResponse(BaseModel):
    """Pipeline KPIs."""
    total: int
    qualified_count: int
    booking_count: int
    qualification_rate: int

    class Config:
        json_schema_extra = {
            "example": {
                "total": 24,
                "qualified_count": 9,
                "booking_count": 6,
                "qualification_rate": 38
            }
        }


class RecentLeadResponse(BaseModel):
    """Single row of the recent-leads table."""
    lead_id: str
    created_at: datetime
    created: str
    channel: str
    name: str
    score: int
    stage: str
    next_action: str


class RecentLeadsResponse(BaseModel):
    items: List[RecentLeadResponse]
    empty_message: Optional[str] = None


class ResetRequest(BaseModel):
    """Destructive reset; must be explicitly confirmed."""
    confirm: bool = False


class ResetResponse(BaseModel):
    performed: bool
    errors: List[str]


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int
