"""Business logic services for the Groupdeedo application."""

from .admin_auth import AdminAuthService, get_admin_auth_service
from .cleanup import CleanupManager, CleanupResult

__all__ = [
    "AdminAuthService",
    "get_admin_auth_service",
    "CleanupManager",
    "CleanupResult",
]
