"""SQLAlchemy model for chat posts."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from groupdeedo.db.session import Base
from groupdeedo.db.time import utcnow


class Post(Base):
    """A single chat message published to a channel.

    Rows are immutable once written; the only lifecycle transition is deletion
    (admin action, auto-moderation or the retention sweep).
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_timestamp", "timestamp"),
        Index("ix_post_channel", "channel"),
        Index("ix_post_location", "latitude", "longitude"),
    )

    # uuid4 assigned by the chat core before the row is written.
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(36), nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Opaque image reference (data URL or upload path); never inspected here.
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Normalized channel; "" is the public room.
    channel: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 0,0 when geofencing is disabled.
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
