"""Schemas for the admin panel."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AdminLogin(BaseModel):
    """Password submitted to open an admin session."""

    password: str = Field(..., min_length=1)


class AdminSession(BaseModel):
    """Opaque admin token returned after login."""

    token: str
    expires_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostStats(BaseModel):
    """Aggregate counters shown on the admin dashboard."""

    total_posts: int = 0
    posts_last_hour: int = 0
    posts_last_day: int = 0
    unique_channels: int = 0
    unique_sessions: int = 0
    posts_with_images: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OldPostsInfo(BaseModel):
    """What a retention sweep would remove."""

    posts_to_delete: int = 0
    estimated_size_kb: int = 0
    oldest_post: datetime | None = None
    newest_post: datetime | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdCreate(BaseModel):
    """Payload for a new promotional ad."""

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(default="", max_length=2000)
    image: str | None = None
    link_url: str | None = Field(default=None, max_length=2000)
    channel: str | None = None
    active: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdUpdate(BaseModel):
    """Partial update for an existing ad."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    body: str | None = Field(default=None, max_length=2000)
    image: str | None = None
    link_url: str | None = Field(default=None, max_length=2000)
    channel: str | None = None
    active: bool | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdOut(BaseModel):
    """Ad as returned by the admin API."""

    id: int
    title: str
    body: str
    image: str | None
    link_url: str | None
    channel: str | None
    active: bool
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
