"""Data access helpers for promotional ads."""
from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from groupdeedo.models import Ad
from groupdeedo.schemas.admin import AdCreate, AdUpdate

__all__ = ["AdRepository"]


class AdRepository:
    """Thin wrapper around database access for ads."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def list_ads(self, *, active_only: bool = False, channel: str | None = None) -> list[Ad]:
        """Return ads, newest first, optionally only active ones for a channel."""
        stmt = select(Ad).order_by(Ad.created_at.desc(), Ad.id.desc())
        if active_only:
            stmt = stmt.where(Ad.active.is_(True))
        if channel is not None:
            stmt = stmt.where(or_(Ad.channel.is_(None), Ad.channel == channel))
        return list(self.session.scalars(stmt))

    def get(self, ad_id: int) -> Ad | None:
        return self.session.get(Ad, ad_id)

    def create(self, data: AdCreate) -> Ad:
        ad = Ad(**data.model_dump())
        self.session.add(ad)
        self.session.commit()
        self.session.refresh(ad)
        return ad

    def update(self, ad: Ad, data: AdUpdate) -> Ad:
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(ad, field, value)
        self.session.commit()
        self.session.refresh(ad)
        return ad

    def delete(self, ad: Ad) -> None:
        self.session.delete(ad)
        self.session.commit()
