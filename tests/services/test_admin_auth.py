# tests/services/test_admin_auth.py
"""Tests for admin password login and session tokens."""

from datetime import UTC, datetime, timedelta

from groupdeedo.services.admin_auth import AdminAuthService

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


def make_service() -> AdminAuthService:
    return AdminAuthService("hunter2", timedelta(hours=24))


def test_verify_password() -> None:
    service = make_service()
    assert service.verify_password("hunter2") is True
    assert service.verify_password("hunter3") is False
    assert service.verify_password("") is False


def test_session_is_valid_until_expiry() -> None:
    service = make_service()
    token, expires_at = service.create_session(now=NOW)

    assert len(token) == 64
    assert expires_at == NOW + timedelta(hours=24)
    assert service.verify_session(token, now=NOW + timedelta(hours=23)) is True
    assert service.verify_session(token, now=NOW + timedelta(hours=25)) is False
    # Expired tokens are forgotten.
    assert service.verify_session(token, now=NOW) is False


def test_missing_or_unknown_token_is_rejected() -> None:
    service = make_service()
    assert service.verify_session(None) is False
    assert service.verify_session("") is False
    assert service.verify_session("deadbeef") is False


def test_revoke_ends_session() -> None:
    service = make_service()
    token, _ = service.create_session()
    service.revoke(token)
    service.revoke(token)
    assert service.verify_session(token) is False


def test_session_info_counts_live_sessions() -> None:
    service = make_service()
    service.create_session(now=NOW)
    service.create_session(now=NOW + timedelta(hours=1))

    info = service.session_info()

    assert info["activeSessions"] == 2
    assert info["oldestSession"] == NOW
    assert info["newestSession"] == NOW + timedelta(hours=1)


def test_creating_a_session_purges_expired_ones() -> None:
    service = make_service()
    service.create_session(now=NOW)
    service.create_session(now=NOW + timedelta(days=2))

    assert service.session_info()["activeSessions"] == 1
