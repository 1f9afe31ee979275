"""
Lead Intelligence Pipeline API - Main Application.

FastAPI application with CORS enabled for the marketing site's client script.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.dependencies import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Lead Intelligence Pipeline API",
    description="Lead capture, scoring, attribution and pipeline reporting for the marketing site",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - the site's pages call this API from the browser
# TODO: Restrict origins to the site's domains in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "lead-intelligence-pipeline-api",
        "storage_backend": get_settings().storage_backend,
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Lead Intelligence Pipeline API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import events, leads, pipeline, sessions

app.include_router(sessions.router, prefix="/api/v1", tags=["Sessions"])
app.include_router(leads.router, prefix="/api/v1", tags=["Leads"])
app.include_router(events.router, prefix="/api/v1", tags=["Events"])
app.include_router(pipeline.router, prefix="/api/v1", tags=["Pipeline"])
