"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VoteType = Literal["up", "down"]
VoteAction = Literal["added", "removed", "updated"]


class VoteCreate(BaseModel):
    """Schema for casting a vote over HTTP."""

    vote_type: VoteType = Field(..., description="'up' or 'down'")
    session_id: str = Field(..., min_length=1, max_length=64)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SocketVote(BaseModel):
    """Inbound ``vote`` socket payload; the voter is the connection's session."""

    post_id: str = Field(..., min_length=1, max_length=36)
    vote_type: VoteType

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VoteCounts(BaseModel):
    """Up/down tallies for one post."""

    up: int = 0
    down: int = 0


class VoteResponse(BaseModel):
    """Result of a vote, mirrored to the client that cast it."""

    success: bool = True
    action: VoteAction
    vote_counts: VoteCounts
    auto_deleted: bool = False
    message: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
