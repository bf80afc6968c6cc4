# tests/test_schemas.py
"""Validation rules for inbound payloads."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from groupdeedo.core.settings import Settings
from groupdeedo.schemas.participant import SettingsUpdate
from groupdeedo.schemas.post import MessageCreate, PostOut


def test_message_is_stripped() -> None:
    assert MessageCreate.model_validate({"message": "  hi  "}).message == "hi"


@pytest.mark.parametrize("payload", [{}, {"message": "   "}, {"message": None, "image": "  "}])
def test_message_or_image_is_required(payload) -> None:
    with pytest.raises(ValidationError):
        MessageCreate.model_validate(payload)


def test_settings_update_tracks_supplied_fields() -> None:
    update = SettingsUpdate.model_validate(
        {"displayName": "Ann", "latitude": None, "radius": 5, "color": "red"}
    )
    assert update.supplied() == {"display_name", "radius"}


def test_numeric_channel_is_coerced() -> None:
    assert SettingsUpdate.model_validate({"channel": 7}).channel == "7"


@pytest.mark.parametrize(
    "payload",
    [{"latitude": 91}, {"longitude": -181}, {"radius": 0}, {"radius": -3}],
)
def test_settings_update_rejects_out_of_range(payload) -> None:
    with pytest.raises(ValidationError):
        SettingsUpdate.model_validate(payload)


def test_naive_timestamps_are_treated_as_utc() -> None:
    post = PostOut(
        id="p",
        session_id="s",
        display_name="d",
        message="m",
        timestamp=datetime(2026, 1, 1, 8, 30),
    )
    assert post.to_wire()["timestamp"] == "2026-01-01T08:30:00Z"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("GEOFENCE_ENABLED", "true")
    monkeypatch.setenv("AUTO_MODERATION_THRESHOLD", "5")
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

    settings = Settings()

    assert settings.geofence_enabled is True
    assert settings.auto_moderation_threshold == 5
    assert settings.uses_default_admin_password is True
