"""
API dependencies.

Shared pipeline objects (store, telemetry sink, change signal) are built once
from settings and handed to routers through FastAPI's Depends.
"""

from __future__ import annotations

from functools import lru_cache

from api.models import SessionContextModel
from config.settings import Settings, build_store, load_settings
from domain.session import SessionContext
from repositories.bounded_store import BoundedLocalStore
from services.lead_capture_service import NotificationDispatcher
from services.signals import PipelineSignal
from services.telemetry_service import LoggingAnalyticsBridge, TelemetrySink


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_store() -> BoundedLocalStore:
    return build_store(get_settings())


@lru_cache(maxsize=1)
def get_signal() -> PipelineSignal:
    return PipelineSignal()


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetrySink:
    return TelemetrySink(get_store(), bridge=LoggingAnalyticsBridge())


def get_dispatcher() -> NotificationDispatcher | None:
    # Email delivery is configured outside this service.
    return None


def to_session_context(model: SessionContextModel, settings: Settings) -> SessionContext:
    return SessionContext(
        page_url=model.page_url,
        referrer=model.referrer,
        locale=model.locale,
        timezone=model.timezone,
        viewport_width=model.viewport_width,
        language=model.language,
        owner_name=settings.owner_name,
    )
