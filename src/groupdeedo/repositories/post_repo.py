"""Data access for posts and votes.

The chat core only depends on the :class:`PostStore` protocol. The shipped
implementation, :class:`SqlPostStore`, runs short synchronous SQLAlchemy
sessions in worker threads so that store calls are the only points where the
event loop suspends.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol, TypeVar

from sqlalchemy import case, delete, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from groupdeedo.core.errors import PostNotFoundError, StoreError
from groupdeedo.db.time import utcnow
from groupdeedo.models import VOTE_DOWN, VOTE_UP, Post, PostVote
from groupdeedo.schemas.admin import OldPostsInfo, PostStats
from groupdeedo.schemas.post import AdminPostOut, PostOut
from groupdeedo.schemas.vote import VoteAction, VoteCounts, VoteType

__all__ = ["PostStore", "SqlPostStore"]

T = TypeVar("T")


class PostStore(Protocol):
    """Persistence operations consumed by the chat core."""

    async def create_post(self, post: PostOut) -> PostOut: ...

    async def get_recent_posts(self, limit: int) -> list[PostOut]: ...

    async def add_vote(self, post_id: str, voter_session_id: str, vote_type: VoteType) -> VoteAction: ...

    async def get_post_vote_counts(self, post_id: str) -> VoteCounts: ...

    async def get_downvoter_count(self, post_id: str) -> int: ...

    async def delete_post(self, post_id: str) -> bool: ...


class SqlPostStore:
    """SQLAlchemy-backed :class:`PostStore` with admin and retention helpers."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the store with a session factory bound to an engine."""
        self._session_factory = session_factory

    async def _run(self, fn: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._call, fn)

    def _call(self, fn: Callable[[Session], T]) -> T:
        try:
            with self._session_factory() as session:
                return fn(session)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    # -- core interface -----------------------------------------------------

    async def create_post(self, post: PostOut) -> PostOut:
        """Insert a post whose id was generated by the caller."""

        def _create(session: Session) -> PostOut:
            session.add(Post(**post.model_dump()))
            session.commit()
            return post

        return await self._run(_create)

    async def get_recent_posts(self, limit: int) -> list[PostOut]:
        """Return up to ``limit`` posts, newest first."""

        def _recent(session: Session) -> list[PostOut]:
            rows = session.scalars(
                select(Post).order_by(Post.timestamp.desc(), Post.id.desc()).limit(limit)
            )
            return [PostOut.model_validate(row) for row in rows]

        return await self._run(_recent)

    async def get_post(self, post_id: str) -> PostOut | None:
        """Return a single post or None."""

        def _get(session: Session) -> PostOut | None:
            row = session.get(Post, post_id)
            return PostOut.model_validate(row) if row is not None else None

        return await self._run(_get)

    async def add_vote(self, post_id: str, voter_session_id: str, vote_type: VoteType) -> VoteAction:
        """Record a vote, toggling it off when the same type is cast again.

        Raises:
            PostNotFoundError: If the post does not exist (or was deleted).
        """

        def _vote(session: Session) -> VoteAction:
            if session.get(Post, post_id) is None:
                raise PostNotFoundError(post_id)

            action: VoteAction
            existing = session.get(PostVote, (post_id, voter_session_id))
            if existing is None:
                session.add(
                    PostVote(post_id=post_id, voter_session_id=voter_session_id, vote_type=vote_type)
                )
                action = "added"
            elif existing.vote_type == vote_type:
                session.delete(existing)
                action = "removed"
            else:
                existing.vote_type = vote_type
                action = "updated"
            session.commit()
            return action

        return await self._run(_vote)

    async def get_post_vote_counts(self, post_id: str) -> VoteCounts:
        """Return up/down tallies for a post."""

        def _counts(session: Session) -> VoteCounts:
            rows = session.execute(
                select(PostVote.vote_type, func.count())
                .where(PostVote.post_id == post_id)
                .group_by(PostVote.vote_type)
            ).all()
            tallies = {vote_type: count for vote_type, count in rows}
            return VoteCounts(up=tallies.get(VOTE_UP, 0), down=tallies.get(VOTE_DOWN, 0))

        return await self._run(_counts)

    async def get_downvoter_count(self, post_id: str) -> int:
        """Return the number of distinct sessions currently downvoting a post."""

        def _downvoters(session: Session) -> int:
            return session.scalar(
                select(func.count(distinct(PostVote.voter_session_id))).where(
                    PostVote.post_id == post_id,
                    PostVote.vote_type == VOTE_DOWN,
                )
            ) or 0

        return await self._run(_downvoters)

    async def delete_post(self, post_id: str) -> bool:
        """Delete a post and its votes; return False if nothing was removed."""

        def _delete(session: Session) -> bool:
            session.execute(delete(PostVote).where(PostVote.post_id == post_id))
            result = session.execute(delete(Post).where(Post.id == post_id))
            session.commit()
            return bool(result.rowcount)

        return await self._run(_delete)

    # -- admin and retention ------------------------------------------------

    async def list_posts(self, since: datetime | None = None, limit: int = 100) -> list[AdminPostOut]:
        """Return posts newer than ``since`` with their vote tallies, newest first."""

        def _list(session: Session) -> list[AdminPostOut]:
            upvotes = func.count(case((PostVote.vote_type == VOTE_UP, 1)))
            downvotes = func.count(case((PostVote.vote_type == VOTE_DOWN, 1)))
            stmt = (
                select(Post, upvotes, downvotes)
                .outerjoin(PostVote, PostVote.post_id == Post.id)
                .group_by(Post.id)
                .order_by(Post.timestamp.desc(), Post.id.desc())
                .limit(limit)
            )
            if since is not None:
                stmt = stmt.where(Post.timestamp >= since)
            results = []
            for post, up, down in session.execute(stmt).all():
                data = PostOut.model_validate(post).model_dump()
                results.append(AdminPostOut(**data, upvotes=up, downvotes=down))
            return results

        return await self._run(_list)

    async def get_stats(self, now: datetime | None = None) -> PostStats:
        """Return aggregate counters for the admin dashboard."""
        current = now or utcnow()

        def _stats(session: Session) -> PostStats:
            def _count(*criteria: object) -> int:
                return session.scalar(select(func.count()).select_from(Post).where(*criteria)) or 0

            return PostStats(
                total_posts=_count(),
                posts_last_hour=_count(Post.timestamp >= current - timedelta(hours=1)),
                posts_last_day=_count(Post.timestamp >= current - timedelta(days=1)),
                unique_channels=session.scalar(select(func.count(distinct(Post.channel)))) or 0,
                unique_sessions=session.scalar(select(func.count(distinct(Post.session_id)))) or 0,
                posts_with_images=_count(Post.image.is_not(None)),
            )

        return await self._run(_stats)

    async def get_old_posts_info(self, days_old: int, now: datetime | None = None) -> OldPostsInfo:
        """Describe the posts a retention sweep of ``days_old`` would remove."""
        cutoff = (now or utcnow()) - timedelta(days=days_old)

        def _info(session: Session) -> OldPostsInfo:
            count, size, oldest, newest = session.execute(
                select(
                    func.count(Post.id),
                    func.coalesce(
                        func.sum(
                            func.length(Post.message) + func.coalesce(func.length(Post.image), 0)
                        ),
                        0,
                    ),
                    func.min(Post.timestamp),
                    func.max(Post.timestamp),
                ).where(Post.timestamp < cutoff)
            ).one()
            return OldPostsInfo(
                posts_to_delete=count,
                estimated_size_kb=round(size / 1024),
                oldest_post=oldest,
                newest_post=newest,
            )

        return await self._run(_info)

    async def delete_old_posts(self, days_old: int, now: datetime | None = None) -> int:
        """Delete posts older than ``days_old`` days and return how many were removed."""
        cutoff = (now or utcnow()) - timedelta(days=days_old)

        def _purge(session: Session) -> int:
            old_ids = select(Post.id).where(Post.timestamp < cutoff)
            session.execute(delete(PostVote).where(PostVote.post_id.in_(old_ids)))
            result = session.execute(delete(Post).where(Post.timestamp < cutoff))
            session.commit()
            return int(result.rowcount or 0)

        return await self._run(_purge)
