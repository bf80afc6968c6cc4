"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .channels import router as channels_router
from .realtime import router as realtime_router
from .votes import router as votes_router

__all__ = [
    "admin_router",
    "channels_router",
    "realtime_router",
    "votes_router",
]
