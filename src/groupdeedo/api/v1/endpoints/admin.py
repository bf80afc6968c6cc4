"""Admin panel endpoints: login, statistics, message deletion and ads."""

from __future__ import annotations

import logging
import os
import platform
import sys
import time
from datetime import timedelta
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from groupdeedo.api.v1.dependencies import AdminAuthDep, AdminTokenDep, HubDep, SessionDep
from groupdeedo.core.errors import StoreError
from groupdeedo.core.settings import settings
from groupdeedo.db.time import utcnow
from groupdeedo.models import Ad
from groupdeedo.realtime.matching import normalize_channel
from groupdeedo.repositories.ad_repo import AdRepository
from groupdeedo.repositories.post_repo import SqlPostStore
from groupdeedo.schemas.admin import AdCreate, AdminLogin, AdminSession, AdOut, AdUpdate, PostStats
from groupdeedo.schemas.post import AdminPostOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

TIME_FILTERS: dict[str, timedelta | None] = {
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "all": None,
}


def _admin_store(hub: HubDep) -> SqlPostStore:
    store = hub.store
    if not isinstance(store, SqlPostStore):  # pragma: no cover - custom stores
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Admin queries require the SQL store",
        )
    return store


def _get_ad_or_404(repo: AdRepository, ad_id: int) -> Ad:
    ad = repo.get(ad_id)
    if ad is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ad not found")
    return ad


@router.post("/login", response_model=AdminSession, response_model_by_alias=True)
async def login(payload: AdminLogin, response: Response, auth: AdminAuthDep) -> AdminSession:
    """Exchange the admin password for a session token."""
    if not auth.verify_password(payload.password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    token, expires_at = auth.create_session()
    response.set_cookie(
        "adminSession",
        token,
        httponly=True,
        samesite="strict",
        max_age=settings.admin_session_hours * 3600,
    )
    return AdminSession(token=token, expires_at=expires_at)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(token: AdminTokenDep, response: Response, auth: AdminAuthDep) -> Response:
    """Revoke the caller's admin session."""
    auth.revoke(token)
    response.status_code = status.HTTP_204_NO_CONTENT
    response.delete_cookie("adminSession")
    return response


@router.get("/stats", response_model=PostStats, response_model_by_alias=True)
async def get_stats(_: AdminTokenDep, hub: HubDep) -> PostStats:
    """Return aggregate post counters."""
    try:
        return await _admin_store(hub).get_stats()
    except StoreError as err:
        raise HTTPException(status_code=500, detail="Failed to load stats") from err


@router.get("/system")
async def get_system_info(
    _: AdminTokenDep, request: Request, hub: HubDep, auth: AdminAuthDep
) -> dict[str, object]:
    """Return process and connection information."""
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "server": {
            "uptime": round(time.monotonic() - started_at, 3),
            "pythonVersion": sys.version.split()[0],
            "platform": platform.platform(),
            "pid": os.getpid(),
        },
        "application": {
            "activeUsers": len(hub.registry),
            "geofenceEnabled": hub.geofence,
            "autoModerationThreshold": hub.moderation.threshold,
            "admin": auth.session_info(),
        },
    }


@router.get("/posts", response_model=list[AdminPostOut], response_model_by_alias=True)
async def list_posts(
    _: AdminTokenDep,
    hub: HubDep,
    filter: Literal["hour", "day", "week", "all"] = Query("day"),
    limit: int = Query(100, ge=1, le=1000),
) -> list[AdminPostOut]:
    """List recent posts with vote tallies."""
    window = TIME_FILTERS[filter]
    since = utcnow() - window if window is not None else None
    try:
        return await _admin_store(hub).list_posts(since=since, limit=limit)
    except StoreError as err:
        raise HTTPException(status_code=500, detail="Failed to load messages") from err


@router.delete("/messages/{post_id}")
async def delete_message(post_id: str, _: AdminTokenDep, hub: HubDep) -> dict[str, object]:
    """Delete a message and notify every connected client."""
    try:
        deleted = await hub.admin_delete(post_id)
    except StoreError as err:
        raise HTTPException(status_code=500, detail="Failed to delete message") from err
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return {"deleted": True, "postId": post_id}


@router.get("/ads", response_model=list[AdOut], response_model_by_alias=True)
async def list_ads(_: AdminTokenDep, db: SessionDep) -> list[AdOut]:
    """List every ad, newest first."""
    return [AdOut.model_validate(ad) for ad in AdRepository(db).list_ads()]


@router.post(
    "/ads",
    response_model=AdOut,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_ad(payload: AdCreate, _: AdminTokenDep, db: SessionDep) -> AdOut:
    """Create a promotional ad."""
    if payload.channel is not None:
        payload = payload.model_copy(update={"channel": normalize_channel(payload.channel)})
    ad = AdRepository(db).create(payload)
    logger.info("Admin created ad %s", ad.id)
    return AdOut.model_validate(ad)


@router.put("/ads/{ad_id}", response_model=AdOut, response_model_by_alias=True)
async def update_ad(ad_id: int, payload: AdUpdate, _: AdminTokenDep, db: SessionDep) -> AdOut:
    """Update fields of an existing ad."""
    repo = AdRepository(db)
    ad = _get_ad_or_404(repo, ad_id)
    if payload.channel is not None:
        payload = payload.model_copy(update={"channel": normalize_channel(payload.channel)})
    return AdOut.model_validate(repo.update(ad, payload))


@router.delete("/ads/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ad(ad_id: int, _: AdminTokenDep, db: SessionDep) -> Response:
    """Delete an ad."""
    repo = AdRepository(db)
    repo.delete(_get_ad_or_404(repo, ad_id))
    logger.info("Admin deleted ad %s", ad_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
