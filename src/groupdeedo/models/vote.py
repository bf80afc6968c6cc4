"""Models capturing voting interactions on posts."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from groupdeedo.db.session import Base

VOTE_UP = "up"
VOTE_DOWN = "down"


class PostVote(Base):
    """Per-session vote on a post."""

    __tablename__ = "post_vote"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_post_vote_type"),
        Index("ix_post_vote_post_id", "post_id"),
    )

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key prevents duplicate votes from the same session.
    voter_session_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    vote_type: Mapped[str] = mapped_column(String(4), nullable=False)
