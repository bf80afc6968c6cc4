"""Schemas describing a connected participant's settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SettingsUpdate(BaseModel):
    """Partial settings update sent by a client over ``updateSettings``.

    Only fields that appear in the payload are merged into the participant;
    anything outside this set is dropped during validation. ``null`` for a
    location field means "not supplied", matching the browser client which
    sends ``null`` until geolocation resolves.
    """

    display_name: str | None = Field(default=None, alias="displayName")
    channel: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius: float | None = Field(default=None, gt=0, le=25_000)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("channel", mode="before")
    @classmethod
    def _coerce_channel(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, int | float):
            return str(value)
        return value

    def supplied(self) -> set[str]:
        """Return the names of fields present in the payload with a usable value."""
        present = set(self.model_fields_set)
        for name in ("latitude", "longitude", "radius", "display_name"):
            if getattr(self, name) is None:
                present.discard(name)
        return present
