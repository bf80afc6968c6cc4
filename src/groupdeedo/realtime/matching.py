"""Rule deciding which participants see which posts."""

from __future__ import annotations

from typing import Protocol

from groupdeedo.utils.location import is_within_radius


class Locatable(Protocol):
    channel: str
    latitude: float | None
    longitude: float | None


class Subscriber(Locatable, Protocol):
    radius_miles: float


def normalize_channel(value: object) -> str:
    """Return the canonical form of a channel name.

    ``None``, ``""`` and whitespace-only names all collapse to the public
    channel ``""``. Names compare case-insensitively.
    """
    if value is None:
        return ""
    return str(value).strip().lower()


def has_location(participant: Locatable) -> bool:
    return participant.latitude is not None and participant.longitude is not None


def matches(participant: Subscriber, post: Locatable, *, geofence: bool) -> bool:
    """Return True if ``participant`` should receive ``post``.

    Channels must be equal after normalization. With ``geofence`` on, the
    participant also needs a known location and the post must fall within
    the participant's radius.
    """
    if normalize_channel(participant.channel) != normalize_channel(post.channel):
        return False
    if not geofence:
        return True
    if not has_location(participant) or not has_location(post):
        return False
    return is_within_radius(
        participant.latitude,  # type: ignore[arg-type]
        participant.longitude,  # type: ignore[arg-type]
        post.latitude,  # type: ignore[arg-type]
        post.longitude,  # type: ignore[arg-type]
        participant.radius_miles,
    )
