"""In-memory registry of participants attached to open connections."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from threading import Lock

from groupdeedo.db.time import utcnow
from groupdeedo.realtime.matching import normalize_channel
from groupdeedo.schemas.participant import SettingsUpdate

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Anonymous"


@dataclass
class Participant:
    """Live identity and preferences of one open connection.

    Nothing here is persisted; a reconnecting client gets a fresh session id
    and must resupply its settings.
    """

    connection_id: str
    session_id: str
    display_name: str = DEFAULT_DISPLAY_NAME
    channel: str = ""
    latitude: float | None = None
    longitude: float | None = None
    radius_miles: float = 10.0
    connected_at: datetime = field(default_factory=utcnow)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class MembershipRegistry:
    """Lock-guarded map from connection id to :class:`Participant`.

    The registry owns the only shared mutable state of the chat core. Reads
    hand out copies so that a participant snapshot taken for a broadcast is
    not affected by a concurrent settings update or disconnect.
    """

    def __init__(
        self,
        *,
        default_display_name: str = DEFAULT_DISPLAY_NAME,
        default_radius_miles: float = 10.0,
        max_display_name_length: int = 50,
    ) -> None:
        self._participants: dict[str, Participant] = {}
        self._lock = Lock()
        self._default_display_name = default_display_name
        self._default_radius_miles = default_radius_miles
        self._max_display_name_length = max_display_name_length

    def __len__(self) -> int:
        with self._lock:
            return len(self._participants)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._participants

    def register(self, connection_id: str) -> Participant:
        """Create a participant with default identity for a new connection.

        Raises:
            ValueError: If the connection id is already registered.
        """
        participant = Participant(
            connection_id=connection_id,
            session_id=str(uuid.uuid4()),
            display_name=self._default_display_name,
            radius_miles=self._default_radius_miles,
        )
        with self._lock:
            if connection_id in self._participants:
                raise ValueError(f"Connection already registered: {connection_id}")
            self._participants[connection_id] = participant
        return replace(participant)

    def get(self, connection_id: str) -> Participant | None:
        """Return a copy of the participant, or None once disconnected."""
        with self._lock:
            participant = self._participants.get(connection_id)
            return replace(participant) if participant is not None else None

    def update(
        self, connection_id: str, settings: SettingsUpdate
    ) -> tuple[Participant | None, bool]:
        """Merge the supplied settings into a participant.

        Returns:
            The updated participant (None if the connection is gone) and
            whether a field that affects matching (channel, location, radius)
            changed. Display-name changes never count as matching changes.
        """
        supplied = settings.supplied()
        with self._lock:
            participant = self._participants.get(connection_id)
            if participant is None:
                return None, False

            before = (
                participant.channel,
                participant.latitude,
                participant.longitude,
                participant.radius_miles,
            )
            if "display_name" in supplied:
                participant.display_name = self._normalize_display_name(settings.display_name)
            if "channel" in supplied:
                participant.channel = normalize_channel(settings.channel)
            if "latitude" in supplied:
                participant.latitude = settings.latitude
            if "longitude" in supplied:
                participant.longitude = settings.longitude
            if "radius" in supplied:
                participant.radius_miles = float(settings.radius)  # type: ignore[arg-type]
            after = (
                participant.channel,
                participant.latitude,
                participant.longitude,
                participant.radius_miles,
            )
            return replace(participant), before != after

    def deregister(self, connection_id: str) -> Participant | None:
        """Remove a participant; unknown ids are ignored."""
        with self._lock:
            return self._participants.pop(connection_id, None)

    def all(self) -> list[Participant]:
        """Return a point-in-time copy of every registered participant."""
        with self._lock:
            return [replace(participant) for participant in self._participants.values()]

    def clear(self) -> None:
        with self._lock:
            self._participants.clear()

    def _normalize_display_name(self, value: str | None) -> str:
        name = (value or "").strip()[: self._max_display_name_length].strip()
        return name or self._default_display_name
