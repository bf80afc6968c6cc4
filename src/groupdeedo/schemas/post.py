"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class PostOut(BaseModel):
    """A chat post as it travels through the core and over the wire.

    Serialized with camelCase keys (``sessionId``, ``displayName``) so the
    browser client can render it directly.
    """

    id: str
    session_id: str
    display_name: str
    message: str
    image: str | None = None
    channel: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes for timezone-aware columns.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_wire(self) -> dict[str, object]:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


class AdminPostOut(PostOut):
    """Post enriched with vote tallies for the admin dashboard."""

    upvotes: int = 0
    downvotes: int = 0


class MessageCreate(BaseModel):
    """Inbound ``sendMessage`` payload."""

    message: str = ""
    image: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("image", mode="before")
    @classmethod
    def _blank_image_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _require_content(self) -> MessageCreate:
        if not self.message and self.image is None:
            raise ValueError("A message or an image is required")
        return self
