"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    channels_router,
    realtime_router,
    votes_router,
)

__all__ = [
    "admin_router",
    "channels_router",
    "realtime_router",
    "votes_router",
]
