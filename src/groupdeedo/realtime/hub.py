"""Translate connection events into registry, store and fan-out operations."""

from __future__ import annotations

import logging
import uuid
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from groupdeedo.core.errors import PostNotFoundError, StoreError
from groupdeedo.core.settings import Settings
from groupdeedo.core.settings import settings as default_settings
from groupdeedo.db.time import utcnow
from groupdeedo.realtime.connections import ConnectionManager, Transport
from groupdeedo.realtime.fanout import FanoutRouter
from groupdeedo.realtime.matching import normalize_channel
from groupdeedo.realtime.moderation import ModerationTrigger
from groupdeedo.realtime.registry import MembershipRegistry, Participant
from groupdeedo.realtime.snapshot import SnapshotLoader
from groupdeedo.repositories.post_repo import PostStore
from groupdeedo.schemas.participant import SettingsUpdate
from groupdeedo.schemas.post import MessageCreate, PostOut
from groupdeedo.schemas.vote import SocketVote, VoteResponse, VoteType

logger = logging.getLogger(__name__)


class ChatHub:
    """Owns the chat core for one server process.

    The hub is created on application startup and torn down on shutdown. It
    wires the membership registry, fan-out router, snapshot loader and
    moderation trigger together and exposes one coroutine per inbound event.
    Errors are reported to the originating connection as ``error`` events
    and never close the connection.
    """

    def __init__(
        self,
        store: PostStore,
        *,
        settings: Settings | None = None,
        registry: MembershipRegistry | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store
        self.registry = registry or MembershipRegistry(
            default_display_name=self.settings.default_display_name,
            default_radius_miles=self.settings.default_radius_miles,
            max_display_name_length=self.settings.max_display_name_length,
        )
        self.connections = ConnectionManager()
        self.router = FanoutRouter(
            self.registry,
            transport or self.connections,
            geofence=self.settings.geofence_enabled,
        )
        self.snapshots = SnapshotLoader(
            self.registry,
            store,
            self.router,
            limit=self.settings.snapshot_limit,
            initial_delay=self.settings.snapshot_delay_seconds,
        )
        self.moderation = ModerationTrigger(
            store, self.router, threshold=self.settings.auto_moderation_threshold
        )

    @property
    def geofence(self) -> bool:
        return self.router.geofence

    # -- lifecycle ----------------------------------------------------------

    def connect(self, connection_id: str) -> Participant:
        """Register a new connection and schedule its first snapshot."""
        participant = self.registry.register(connection_id)
        logger.info(
            "User connected: %s (session %s, %d online)",
            connection_id,
            participant.session_id,
            len(self.registry),
        )
        self.snapshots.schedule_initial(connection_id)
        return participant

    def disconnect(self, connection_id: str) -> None:
        """Forget a connection; later broadcasts will not target it."""
        participant = self.registry.deregister(connection_id)
        self.snapshots.cancel(connection_id)
        if participant is not None:
            logger.info("User disconnected: %s (%d online)", connection_id, len(self.registry))

    async def shutdown(self) -> None:
        await self.snapshots.shutdown()
        await self.connections.close_all()
        self.registry.clear()

    # -- inbound events -----------------------------------------------------

    async def handle(self, connection_id: str, event: str, data: Any) -> None:
        """Dispatch one inbound socket event."""
        if event == "updateSettings":
            await self.update_settings(connection_id, data)
        elif event == "sendMessage":
            await self.send_message(connection_id, data)
        elif event == "requestPosts":
            await self.request_posts(connection_id, data)
        elif event == "vote":
            await self.vote_from_connection(connection_id, data)
        elif event == "getChannelInfo":
            self.router.send(connection_id, "channelInfo", self.channel_info(data))
        else:
            logger.debug("Unknown event %r from %s", event, connection_id)
            self.router.send(connection_id, "error", "Unknown event")

    async def update_settings(self, connection_id: str, data: Any) -> Participant | None:
        """Apply a partial settings update and refresh the view if needed."""
        try:
            update = SettingsUpdate.model_validate(data if data is not None else {})
        except ValidationError:
            self.router.send(connection_id, "error", "Invalid settings")
            return None

        participant, changed = self.registry.update(connection_id, update)
        if participant is None:
            return None

        logger.info(
            "User %s (%s) updated settings: channel=[%s] radius=%s location=%s",
            participant.display_name,
            connection_id,
            participant.channel,
            participant.radius_miles,
            (
                f"{participant.latitude:.6f}, {participant.longitude:.6f}"
                if participant.has_location
                else "none"
            ),
        )
        if changed:
            self.snapshots.schedule(connection_id)
        return participant

    async def request_posts(self, connection_id: str, data: Any) -> None:
        """Reload the snapshot, switching channel first when one is given."""
        if isinstance(data, dict) and "channel" in data:
            try:
                update = SettingsUpdate.model_validate({"channel": data["channel"]})
            except ValidationError:
                self.router.send(connection_id, "error", "Invalid settings")
                return
            participant, _ = self.registry.update(connection_id, update)
            if participant is None:
                return
        self.snapshots.schedule(connection_id)

    async def send_message(self, connection_id: str, data: Any) -> PostOut | None:
        """Persist a new post from a connection and fan it out."""
        participant = self.registry.get(connection_id)
        if participant is None:
            return None

        if self.geofence and not participant.has_location:
            self.router.send(connection_id, "error", "Location required to send messages")
            return None

        try:
            content = MessageCreate.model_validate(data if data is not None else {})
        except ValidationError as exc:
            # Only the whole-payload content check reports with an empty location.
            empty = all(
                error["type"] == "value_error" and not error["loc"] for error in exc.errors()
            )
            reason = "Message is empty" if empty else "Invalid message"
            self.router.send(connection_id, "error", reason)
            return None
        if len(content.message) > self.settings.max_message_length:
            self.router.send(
                connection_id,
                "error",
                f"Message exceeds {self.settings.max_message_length} characters",
            )
            return None

        post = PostOut(
            id=str(uuid.uuid4()),
            session_id=participant.session_id,
            display_name=participant.display_name,
            message=content.message,
            image=content.image,
            channel=normalize_channel(participant.channel),
            latitude=participant.latitude if self.geofence else 0.0,
            longitude=participant.longitude if self.geofence else 0.0,
            timestamp=utcnow(),
        )
        logger.info(
            "User %s (%s) sending message to channel [%s]",
            participant.display_name,
            connection_id,
            post.channel,
        )

        try:
            await self.store.create_post(post)
        except StoreError:
            logger.exception("Error sending message from %s", connection_id)
            self.router.send(connection_id, "error", "Failed to send message")
            return None

        self.router.broadcast_new_post(post)
        return post

    async def vote_from_connection(self, connection_id: str, data: Any) -> VoteResponse | None:
        """Cast a vote using the connection's session as the voter identity."""
        participant = self.registry.get(connection_id)
        if participant is None:
            return None
        try:
            vote = SocketVote.model_validate(data if data is not None else {})
        except ValidationError:
            self.router.send(connection_id, "error", "Invalid vote")
            return None

        try:
            result = await self.cast_vote(participant.session_id, vote.post_id, vote.vote_type)
        except PostNotFoundError:
            self.router.send(connection_id, "error", "Message not found")
            return None
        except StoreError:
            logger.exception("Error recording vote from %s", connection_id)
            self.router.send(connection_id, "error", "Failed to vote")
            return None

        self.router.send(connection_id, "voteResult", result.model_dump(by_alias=True))
        return result

    async def cast_vote(
        self, voter_session_id: str, post_id: str, vote_type: VoteType
    ) -> VoteResponse:
        """Record a vote, broadcast the new tallies and run auto-moderation.

        Raises:
            PostNotFoundError: If the post does not exist.
            StoreError: If the store fails.
        """
        action = await self.store.add_vote(post_id, voter_session_id, vote_type)
        counts = await self.store.get_post_vote_counts(post_id)
        self.router.broadcast_vote_update(post_id, counts)

        outcome = await self.moderation.on_vote(post_id, vote_type, action)
        message = None
        if outcome.deleted:
            message = (
                f"Message removed by community moderation ({outcome.downvote_count} downvotes)"
            )
        return VoteResponse(
            action=action,
            vote_counts=counts,
            auto_deleted=outcome.deleted,
            message=message,
        )

    async def admin_delete(self, post_id: str) -> bool:
        return await self.moderation.admin_delete(post_id)

    def channel_info(self, channel: Any) -> dict[str, str]:
        """Return the shareable link for a channel."""
        name = "" if channel is None else str(channel)
        base_url = self.settings.base_url.rstrip("/")
        return {"channel": name, "url": f"{base_url}/?channel={quote(name, safe='')}"}
