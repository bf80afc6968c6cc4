"""
Pydantic schemas for socket events and API request/response models.

These schemas define the structure of wire data for serialization and validation.
"""

from .admin import AdCreate, AdminLogin, AdminSession, AdOut, AdUpdate, OldPostsInfo, PostStats
from .participant import SettingsUpdate
from .post import AdminPostOut, MessageCreate, PostOut
from .vote import SocketVote, VoteCounts, VoteCreate, VoteResponse

__all__ = [
    "AdCreate", "AdOut", "AdUpdate",
    "AdminLogin", "AdminSession", "OldPostsInfo", "PostStats",
    "SettingsUpdate",
    "AdminPostOut", "MessageCreate", "PostOut",
    "SocketVote", "VoteCounts", "VoteCreate", "VoteResponse",
]
