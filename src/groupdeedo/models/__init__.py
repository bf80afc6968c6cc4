"""SQLAlchemy models for the Groupdeedo application."""

from .ad import Ad
from .post import Post
from .vote import VOTE_DOWN, VOTE_UP, PostVote

__all__ = [
    "Ad",
    "Post",
    "PostVote", "VOTE_UP", "VOTE_DOWN",
]
