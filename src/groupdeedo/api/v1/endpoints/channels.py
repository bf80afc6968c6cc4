"""Channel sharing and public ad endpoints."""

from urllib.parse import quote

from fastapi import APIRouter, Query, Request

from groupdeedo.api.v1.dependencies import SessionDep
from groupdeedo.realtime.matching import normalize_channel
from groupdeedo.repositories.ad_repo import AdRepository
from groupdeedo.schemas.admin import AdOut

router = APIRouter(tags=["channels"])


@router.get("/channel/{channel_name}")
async def get_channel_info(channel_name: str, request: Request) -> dict[str, str]:
    """Return the shareable URL (and QR payload) for a channel."""
    base_url = str(request.base_url).rstrip("/")
    channel_url = f"{base_url}/?channel={quote(channel_name, safe='')}"
    return {"channel": channel_name, "url": channel_url, "qrData": channel_url}


@router.get("/ads", response_model=list[AdOut], response_model_by_alias=True)
async def list_active_ads(
    db: SessionDep,
    channel: str | None = Query(None),
) -> list[AdOut]:
    """Return active ads for a channel (including ads targeting every channel)."""
    repo = AdRepository(db)
    ads = repo.list_ads(
        active_only=True,
        channel=normalize_channel(channel) if channel is not None else None,
    )
    return [AdOut.model_validate(ad) for ad in ads]
