"""
Tests for the HTTP API (`api/main.py` and routers).

Shared pipeline objects are replaced with per-test instances through
FastAPI dependency overrides.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_settings, get_signal, get_store, get_telemetry
from api.main import app
from config.settings import Settings
from repositories.lead_repository import list_leads
from services.signals import PipelineSignal


@pytest.fixture
def client(store, telemetry):
    signal = PipelineSignal()
    app.dependency_overrides[get_settings] = lambda: Settings(owner_name="Acme Studio")
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_telemetry] = lambda: telemetry
    app.dependency_overrides[get_signal] = lambda: signal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_start_session_captures_attribution(client, telemetry) -> None:
    response = client.post(
        "/api/v1/sessions",
        json={"page_url": "/?utm_source=google&utm_campaign=spring", "viewport_width": 390},
    )

    assert response.status_code == 200
    attribution = response.json()["attribution"]
    assert attribution["utm_source"] == "google"
    assert attribution["device"] == "mobile"
    assert telemetry.list_events()[-1]["event"] == "session_start"


def test_get_attribution_without_capture(client) -> None:
    response = client.get("/api/v1/attribution", params={"page_url": "/pricing?x=1", "viewport_width": 1300})

    assert response.json()["attribution"] == {
        "landing_page": "/pricing?x=1",
        "locale": "",
        "timezone": "",
        "device": "desktop",
    }


def test_submit_lead(client, store) -> None:
    response = client.post(
        "/api/v1/leads/analysis",
        json={"payload": {"decision_role": "Kurucu", "urgency": "Yüksek", "budget": "85000"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "accepted"
    assert body["score"] == 86
    assert body["stage"] == "hot"
    assert body["priority"] == "high"
    assert body["next_action_type"] == "same_day_discovery"
    assert body["lead_id"].startswith("lead_")
    assert list_leads(store)[0].get("owner") == "Acme Studio"


def test_submit_lead_unknown_channel(client) -> None:
    response = client.post("/api/v1/leads/newsletter", json={"payload": {}})

    assert response.status_code == 400


def test_submit_lead_cooldown(client) -> None:
    assert client.post("/api/v1/leads/contact", json={"payload": {}}).status_code == 200

    response = client.post("/api/v1/leads/contact", json={"payload": {}})

    assert response.status_code == 429
    assert 0 < int(response.headers["Retry-After"]) <= 10


def test_honeypot_looks_accepted_but_stores_nothing(client, store) -> None:
    response = client.post("/api/v1/leads/contact", json={"payload": {"website_hp": "x"}})

    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert response.json()["lead_id"] is None
    assert list_leads(store) == []


def test_track_event(client, bridge) -> None:
    response = client.post("/api/v1/events", json={"event": "cta_booking_click", "params": {"position": "hero"}})

    assert response.status_code == 200
    assert response.json()["stored"] is True
    assert bridge.events == [{"event": "cta_booking_click", "position": "hero"}]


def test_track_event_requires_name(client) -> None:
    assert client.post("/api/v1/events", json={"event": ""}).status_code == 422


def test_kpis_and_recent(client) -> None:
    client.post("/api/v1/leads/booking", json={"payload": {"name": "Ayşe"}})

    kpis = client.get("/api/v1/pipeline/kpis").json()
    recent = client.get("/api/v1/pipeline/leads/recent", params={"language": "tr"}).json()

    assert kpis == {"total": 1, "qualified_count": 0, "booking_count": 1, "qualification_rate": 0}
    assert recent["empty_message"] is None
    assert recent["items"][0]["name"] == "Ayşe"
    assert recent["items"][0]["channel"] == "Rezervasyon"


def test_recent_when_empty(client) -> None:
    recent = client.get("/api/v1/pipeline/leads/recent").json()

    assert recent == {"items": [], "empty_message": "No lead records yet."}


def test_export(client) -> None:
    assert client.get("/api/v1/pipeline/export").status_code == 204

    client.post("/api/v1/leads/booking", json={"payload": {"name": "Ayşe"}})
    response = client.get("/api/v1/pipeline/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "crm-leads.csv" in response.headers["content-disposition"]
    assert response.text.startswith("createdAt,type,stage,priority,owner,name")


def test_reset(client, telemetry) -> None:
    client.post("/api/v1/leads/booking", json={"payload": {}})

    assert client.post("/api/v1/pipeline/reset", json={}).status_code == 400

    response = client.post("/api/v1/pipeline/reset", json={"confirm": True})

    assert response.json() == {"performed": True, "errors": []}
    assert client.get("/api/v1/pipeline/kpis").json()["total"] == 0
    assert [event["event"] for event in telemetry.list_events()] == ["pipeline_clear"]


def test_error_responses_are_documented(client) -> None:
    schema = client.get("/openapi.json").json()

    lead_responses = schema["paths"]["/api/v1/leads/{channel}"]["post"]["responses"]
    reset_responses = schema["paths"]["/api/v1/pipeline/reset"]["post"]["responses"]

    assert "ErrorResponse" in schema["components"]["schemas"]
    for responses, status in ((lead_responses, "429"), (lead_responses, "400"), (reset_responses, "400")):
        assert responses[status]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
