# tests/realtime/test_auto_moderation.py
"""Tests for community and admin removal of posts."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from groupdeedo.realtime.fanout import FanoutRouter
from groupdeedo.realtime.moderation import ModerationTrigger
from groupdeedo.realtime.registry import MembershipRegistry
from groupdeedo.repositories.post_repo import SqlPostStore
from groupdeedo.schemas.post import PostOut
from tests.conftest import RecordingTransport, join


@pytest_asyncio.fixture()
async def post(store: SqlPostStore) -> PostOut:
    return await store.create_post(
        PostOut(
            id="doomed",
            session_id="author",
            display_name="Ann",
            message="spam",
            timestamp=datetime(2026, 2, 2, tzinfo=UTC),
        )
    )


@pytest.fixture()
def trigger(store: SqlPostStore, router: FanoutRouter) -> ModerationTrigger:
    return ModerationTrigger(store, router, threshold=3)


async def downvote(store: SqlPostStore, trigger: ModerationTrigger, voter: str, post_id: str):
    action = await store.add_vote(post_id, voter, "down")
    return await trigger.on_vote(post_id, "down", action)


@pytest.mark.asyncio
async def test_third_distinct_downvote_deletes_once(
    post: PostOut,
    store: SqlPostStore,
    trigger: ModerationTrigger,
    registry: MembershipRegistry,
    transport: RecordingTransport,
) -> None:
    join(registry, "watcher", channel="elsewhere")

    first = await downvote(store, trigger, "s1", post.id)
    second = await downvote(store, trigger, "s2", post.id)
    third = await downvote(store, trigger, "s3", post.id)

    assert (first.downvote_count, first.deleted) == (1, False)
    assert (second.downvote_count, second.deleted) == (2, False)
    assert (third.downvote_count, third.deleted) == (3, True)
    assert await store.get_post(post.id) is None
    assert transport.sent_to("watcher", "messageDeleted") == [
        {"postId": post.id, "reason": "auto-moderation", "downvoteCount": 3}
    ]


@pytest.mark.asyncio
async def test_repeat_downvote_from_one_session_does_not_count(
    post: PostOut, store: SqlPostStore, trigger: ModerationTrigger
) -> None:
    await downvote(store, trigger, "s1", post.id)
    await downvote(store, trigger, "s2", post.id)
    # Same session downvoting again withdraws its vote.
    withdrawn = await downvote(store, trigger, "s2", post.id)

    assert withdrawn.checked is False
    assert await store.get_downvoter_count(post.id) == 1
    assert await store.get_post(post.id) is not None


@pytest.mark.asyncio
async def test_upvotes_never_trigger(trigger: ModerationTrigger) -> None:
    outcome = await trigger.on_vote("any", "up", "added")
    assert outcome.checked is False
    assert outcome.deleted is False


@pytest.mark.asyncio
async def test_breach_after_deletion_is_a_no_op(
    registry: MembershipRegistry, router: FanoutRouter, transport: RecordingTransport
) -> None:
    store = AsyncMock()
    store.get_downvoter_count.return_value = 4
    store.delete_post.return_value = False
    trigger = ModerationTrigger(store, router, threshold=3)
    join(registry, "watcher")

    outcome = await trigger.on_vote("gone", "down", "added")

    assert outcome.checked is True
    assert outcome.deleted is False
    assert transport.recipients("messageDeleted") == []


@pytest.mark.asyncio
async def test_flip_to_downvote_counts(
    post: PostOut, store: SqlPostStore, trigger: ModerationTrigger
) -> None:
    await downvote(store, trigger, "s1", post.id)
    await downvote(store, trigger, "s2", post.id)
    await store.add_vote(post.id, "s3", "up")
    action = await store.add_vote(post.id, "s3", "down")

    outcome = await trigger.on_vote(post.id, "down", action)

    assert action == "updated"
    assert outcome.deleted is True


@pytest.mark.asyncio
async def test_admin_delete_broadcasts_once(
    post: PostOut,
    trigger: ModerationTrigger,
    registry: MembershipRegistry,
    transport: RecordingTransport,
) -> None:
    join(registry, "watcher")

    assert await trigger.admin_delete(post.id) is True
    assert await trigger.admin_delete(post.id) is False
    assert transport.sent_to("watcher", "messageDeleted") == [
        {"postId": post.id, "reason": "admin"}
    ]
