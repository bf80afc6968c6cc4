"""Password login and in-memory sessions for the admin panel."""

from __future__ import annotations

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock

from groupdeedo.core.settings import settings
from groupdeedo.db.time import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AdminSessionRecord:
    created_at: datetime
    expires_at: datetime
    last_access: datetime


class AdminAuthService:
    """Issue and verify short-lived admin session tokens."""

    def __init__(self, password: str, session_timeout: timedelta) -> None:
        self._password = password
        self._timeout = session_timeout
        self._sessions: dict[str, AdminSessionRecord] = {}
        self._lock = Lock()

    def verify_password(self, password: str) -> bool:
        return hmac.compare_digest(password.encode(), self._password.encode())

    def create_session(self, now: datetime | None = None) -> tuple[str, datetime]:
        """Create a session and return ``(token, expires_at)``."""
        current = now or utcnow()
        token = secrets.token_hex(32)
        expires_at = current + self._timeout
        with self._lock:
            self._sessions[token] = AdminSessionRecord(current, expires_at, current)
            self._purge_expired(current)
        return token, expires_at

    def verify_session(self, token: str | None, now: datetime | None = None) -> bool:
        """Return True for a live token, refreshing its last-access time."""
        if not token:
            return False
        current = now or utcnow()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return False
            if current > record.expires_at:
                del self._sessions[token]
                return False
            record.last_access = current
            return True

    def revoke(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def session_info(self) -> dict[str, object]:
        with self._lock:
            records = list(self._sessions.values())
        return {
            "activeSessions": len(records),
            "oldestSession": min((r.created_at for r in records), default=None),
            "newestSession": max((r.created_at for r in records), default=None),
        }

    def _purge_expired(self, now: datetime) -> None:
        for token in [t for t, r in self._sessions.items() if now > r.expires_at]:
            del self._sessions[token]


_admin_auth: AdminAuthService | None = None


def get_admin_auth_service() -> AdminAuthService:
    """Return the process-wide admin auth service."""
    global _admin_auth
    if _admin_auth is None:
        if settings.uses_default_admin_password:
            logger.warning(
                "Using default admin password. Set ADMIN_PASSWORD for production."
            )
        _admin_auth = AdminAuthService(
            settings.admin_password, timedelta(hours=settings.admin_session_hours)
        )
    return _admin_auth
