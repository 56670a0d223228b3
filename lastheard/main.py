"""
Brandmeister Last-Heard API v1.0.0

A FastAPI application that records completed DMR group calls from the
Brandmeister last-heard feed and serves activity statistics by talkgroup,
callsign and geography.
"""
import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from lastheard import __version__
from lastheard.core import get_settings, init_db, close_db
from lastheard.core.database import AsyncSessionLocal
from lastheard.routers import public, api, user, system
from lastheard.services.feed import BrandmeisterFeed
from lastheard.services.maintenance import MaintenanceScheduler

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=None),
            HttpxIntegration(),
        ],
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
        release=f"bm-lastheard-api@{__version__}",
    )
    logger.info("Sentry error tracking enabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting Brandmeister Last-Heard API v{__version__}")

    await init_db()
    logger.info("Database initialized")

    feed = None
    if settings.feed_enabled:
        feed = BrandmeisterFeed(AsyncSessionLocal, settings)
        await feed.start()
    else:
        logger.info("Brandmeister feed disabled")
    app.state.feed = feed

    maintenance = None
    if settings.maintenance_enabled:
        maintenance = MaintenanceScheduler(AsyncSessionLocal, settings)
        await maintenance.start()
    else:
        logger.info("Maintenance scheduler disabled")
    app.state.maintenance = maintenance

    yield

    # Shutdown
    logger.info("Shutting down...")

    if feed:
        await feed.stop()
    if maintenance:
        await maintenance.stop()

    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Brandmeister Last-Heard API",
    version=__version__,
    description="""
## Overview
Live statistics for the Brandmeister DMR network, built from the last-heard feed.

## Features
- **Talkgroup activity**: calls and airtime per talkgroup over a time window
- **Callsign activity**: calls and airtime per operator
- **Geography**: filter by continent and country using the talkgroup directory
- **Recent calls**: the latest completed calls

Only completed group voice calls longer than five seconds are recorded.
The local talkgroup 9 is never included. Call records are kept for seven days.
    """,
    lifespan=lifespan,
    docs_url="/api-docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Public",
            "description": "Unauthenticated dashboard data"
        },
        {
            "name": "Authenticated",
            "description": "Same data for API key or session holders"
        },
        {
            "name": "User",
            "description": "Login sessions"
        },
        {
            "name": "System",
            "description": "Health checks and metrics"
        },
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(public.router)
app.include_router(api.router)
app.include_router(user.router)
app.include_router(system.router)


@app.get("/", include_in_schema=False)
async def root():
    return {"message": f"Brandmeister Last-Heard API v{__version__}", "docs": "/api-docs"}

