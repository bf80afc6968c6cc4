"""Community and admin removal of posts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from groupdeedo.realtime.fanout import FanoutRouter
from groupdeedo.repositories.post_repo import PostStore
from groupdeedo.schemas.vote import VoteAction, VoteType

logger = logging.getLogger(__name__)

AUTO_MODERATION_REASON = "auto-moderation"
ADMIN_REASON = "admin"


@dataclass(frozen=True)
class ModerationOutcome:
    """Result of evaluating a post after a vote."""

    checked: bool = False
    downvote_count: int = 0
    deleted: bool = False


class ModerationTrigger:
    """Delete posts once enough distinct sessions downvote them.

    A post moves from active to deleted exactly once. The downvote count is
    always re-read from the store because votes can be added, removed or
    flipped; the deletion broadcast is only sent when the store reports that
    a row was actually removed, so a second threshold breach against a post
    that is already gone is a no-op.
    """

    def __init__(self, store: PostStore, router: FanoutRouter, *, threshold: int = 3) -> None:
        self.store = store
        self.router = router
        self.threshold = threshold

    async def on_vote(
        self, post_id: str, vote_type: VoteType, action: VoteAction
    ) -> ModerationOutcome:
        """Evaluate a post after a vote was recorded.

        Only a downvote that was added or changed-to triggers a recount;
        removing a downvote can never push a post over the threshold.
        """
        if vote_type != "down" or action == "removed":
            return ModerationOutcome()

        downvotes = await self.store.get_downvoter_count(post_id)
        if downvotes < self.threshold:
            return ModerationOutcome(checked=True, downvote_count=downvotes)

        deleted = await self.store.delete_post(post_id)
        if not deleted:
            logger.info("Post %s already removed; skipping auto-moderation broadcast", post_id)
            return ModerationOutcome(checked=True, downvote_count=downvotes)

        logger.info("Auto-moderated post %s after %d downvotes", post_id, downvotes)
        self.router.broadcast_deletion(post_id, AUTO_MODERATION_REASON, downvotes)
        return ModerationOutcome(checked=True, downvote_count=downvotes, deleted=True)

    async def admin_delete(self, post_id: str) -> bool:
        """Delete a post on behalf of an administrator."""
        deleted = await self.store.delete_post(post_id)
        if deleted:
            logger.info("Admin deleted post %s", post_id)
            self.router.broadcast_deletion(post_id, ADMIN_REASON)
        return deleted
