"""Send each participant the filtered recent history for its current view."""

from __future__ import annotations

import asyncio
import logging

from groupdeedo.core.errors import StoreError
from groupdeedo.realtime.fanout import FanoutRouter
from groupdeedo.realtime.matching import matches
from groupdeedo.realtime.registry import MembershipRegistry
from groupdeedo.repositories.post_repo import PostStore
from groupdeedo.schemas.post import PostOut

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """Build and push the ``posts`` snapshot for one connection.

    A snapshot is a full replacement of the client's view: the most recent
    posts from the store, oldest first, filtered with the same matching rule
    the fan-out router uses. Loads for different connections are independent
    and may interleave with live broadcasts.
    """

    def __init__(
        self,
        registry: MembershipRegistry,
        store: PostStore,
        router: FanoutRouter,
        *,
        limit: int = 100,
        initial_delay: float = 1.0,
    ) -> None:
        self.registry = registry
        self.store = store
        self.router = router
        self.limit = limit
        self.initial_delay = initial_delay
        self._pending: dict[str, asyncio.Task[None]] = {}

    async def load_for(self, connection_id: str) -> list[PostOut] | None:
        """Fetch, filter and push a snapshot.

        Returns:
            The posts that were sent, or None when the connection is gone or
            the store failed.
        """
        if self.registry.get(connection_id) is None:
            return None

        try:
            recent = await self.store.get_recent_posts(self.limit)
        except StoreError:
            logger.exception("Failed to load snapshot for %s", connection_id)
            self.router.send(connection_id, "error", "Failed to load messages")
            return None

        # Settings may have changed while the store call was in flight.
        participant = self.registry.get(connection_id)
        if participant is None:
            return None

        visible = [
            post
            for post in reversed(recent)
            if matches(participant, post, geofence=self.router.geofence)
        ]
        self.router.send(connection_id, "posts", [post.to_wire() for post in visible])
        logger.info(
            "Snapshot for %s in channel [%s]: %d of %d recent posts",
            connection_id,
            participant.channel,
            len(visible),
            len(recent),
        )
        return visible

    def schedule(self, connection_id: str, delay: float = 0.0) -> asyncio.Task[None]:
        """Run :meth:`load_for` in the background, replacing any pending load."""
        self.cancel(connection_id)
        task = asyncio.create_task(self._delayed_load(connection_id, delay))
        self._pending[connection_id] = task
        task.add_done_callback(lambda done: self._forget(connection_id, done))
        return task

    def schedule_initial(self, connection_id: str) -> asyncio.Task[None]:
        """Schedule the first snapshot after the configured settling delay."""
        return self.schedule(connection_id, self.initial_delay)

    def cancel(self, connection_id: str) -> None:
        task = self._pending.pop(connection_id, None)
        if task is not None and not task.done():
            task.cancel()

    async def shutdown(self) -> None:
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _delayed_load(self, connection_id: str, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            await self.load_for(connection_id)
        except Exception:
            logger.exception("Snapshot task for %s failed", connection_id)

    def _forget(self, connection_id: str, task: asyncio.Task[None]) -> None:
        if self._pending.get(connection_id) is task:
            del self._pending[connection_id]
