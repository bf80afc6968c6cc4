# src/groupdeedo/main.py
"""Main entry point for the Groupdeedo application."""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from groupdeedo.api.v1 import admin_router, channels_router, realtime_router, votes_router
from groupdeedo.core.settings import settings
from groupdeedo.db.session import SessionLocal, create_tables
from groupdeedo.db.time import utcnow
from groupdeedo.realtime.hub import ChatHub
from groupdeedo.repositories.post_repo import SqlPostStore

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Real-time channel chat with community moderation",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(channels_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(realtime_router)


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.started_at = time.monotonic()
    # Tests install their own hub bound to an in-memory store.
    if getattr(app.state, "hub", None) is None:
        create_tables()
        app.state.hub = ChatHub(SqlPostStore(SessionLocal), settings=settings)
    logger.info(
        "%s started (geofence %s)",
        settings.app_name,
        "enabled" if settings.geofence_enabled else "disabled",
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    hub: ChatHub | None = getattr(app.state, "hub", None)
    if hub is not None:
        await hub.shutdown()
    app.state.hub = None
    logger.info("%s stopped", settings.app_name)


@app.get("/health")
async def health_check(request: Request) -> dict[str, object]:
    """Health check endpoint to verify the service is running."""
    hub: ChatHub | None = getattr(request.app.state, "hub", None)
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "status": "healthy" if hub is not None else "starting",
        "timestamp": utcnow().isoformat(),
        "activeUsers": len(hub.registry) if hub is not None else 0,
        "uptime": round(time.monotonic() - started_at, 3),
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "websocket": "/ws",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("groupdeedo.main:app", host="0.0.0.0", port=3000, reload=settings.debug)
