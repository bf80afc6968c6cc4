"""Push new posts, vote tallies and deletions to connected participants."""

from __future__ import annotations

import logging
from typing import Any, Literal

from groupdeedo.realtime.connections import Transport
from groupdeedo.realtime.matching import matches
from groupdeedo.realtime.registry import MembershipRegistry
from groupdeedo.schemas.post import PostOut
from groupdeedo.schemas.vote import VoteCounts

logger = logging.getLogger(__name__)

DeletionReason = Literal["admin", "auto-moderation"]


class FanoutRouter:
    """Route outbound events to the participants that should receive them.

    Every method walks a point-in-time copy of the registry and pushes to
    each target through a best-effort transport. Pushes never suspend and a
    failed push is logged and skipped, so one dead connection cannot abort the
    loop over the others. The router never mutates the registry or the store.
    """

    def __init__(
        self,
        registry: MembershipRegistry,
        transport: Transport,
        *,
        geofence: bool = False,
    ) -> None:
        self.registry = registry
        self.transport = transport
        self.geofence = geofence

    def send(self, connection_id: str, event: str, data: Any) -> bool:
        """Push one event to one connection, swallowing delivery failures."""
        try:
            delivered = self.transport.push(connection_id, event, data)
        except Exception:
            logger.exception("Push of %s to %s raised", event, connection_id)
            return False
        if not delivered:
            logger.warning("Push of %s to %s was dropped", event, connection_id)
        return delivered

    def broadcast_new_post(self, post: PostOut) -> int:
        """Send ``newPost`` to every participant whose view includes ``post``.

        Returns:
            Number of connections the post was handed to.
        """
        participants = self.registry.all()
        payload = post.to_wire()
        delivered = 0
        for participant in participants:
            if not matches(participant, post, geofence=self.geofence):
                logger.debug(
                    "Skipping %s: channel [%s] vs post [%s]",
                    participant.connection_id,
                    participant.channel,
                    post.channel,
                )
                continue
            if self.send(participant.connection_id, "newPost", payload):
                delivered += 1
        logger.info(
            "Post %s in channel [%s] broadcast to %d of %d participants",
            post.id,
            post.channel,
            delivered,
            len(participants),
        )
        return delivered

    def broadcast_vote_update(self, post_id: str, vote_counts: VoteCounts) -> int:
        """Send ``voteUpdate`` to every participant regardless of channel."""
        return self._broadcast_all(
            "voteUpdate",
            {"postId": post_id, "voteCounts": vote_counts.model_dump()},
        )

    def broadcast_deletion(
        self,
        post_id: str,
        reason: DeletionReason,
        downvote_count: int | None = None,
    ) -> int:
        """Send ``messageDeleted`` to every participant regardless of channel."""
        payload: dict[str, Any] = {"postId": post_id, "reason": reason}
        if downvote_count is not None:
            payload["downvoteCount"] = downvote_count
        delivered = self._broadcast_all("messageDeleted", payload)
        logger.info("Deletion of %s (%s) broadcast to %d participants", post_id, reason, delivered)
        return delivered

    def _broadcast_all(self, event: str, payload: dict[str, Any]) -> int:
        delivered = 0
        for participant in self.registry.all():
            if self.send(participant.connection_id, event, payload):
                delivered += 1
        return delivered
