"""Retention sweep that removes old posts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from groupdeedo.repositories.post_repo import SqlPostStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a retention run."""

    deleted: int = 0
    candidates: int = 0
    dry_run: bool = False


class CleanupManager:
    """Delete posts older than a number of days, with a dry-run mode."""

    def __init__(self, store: SqlPostStore) -> None:
        self.store = store

    async def run_cleanup(self, days_old: int = 30, dry_run: bool = False) -> CleanupResult:
        """Remove posts older than ``days_old`` days unless ``dry_run`` is set."""
        if days_old < 1:
            raise ValueError("days_old must be a positive number")

        logger.info("Starting cleanup (%s), target: posts older than %d days",
                    "DRY RUN" if dry_run else "LIVE", days_old)
        info = await self.store.get_old_posts_info(days_old)
        logger.info(
            "Cleanup analysis: %d posts, ~%d KB, oldest=%s newest=%s",
            info.posts_to_delete,
            info.estimated_size_kb,
            info.oldest_post,
            info.newest_post,
        )

        if info.posts_to_delete == 0:
            logger.info("No cleanup needed: no posts older than %d days", days_old)
            return CleanupResult(dry_run=dry_run)

        if dry_run:
            logger.info("DRY RUN: would delete %d posts", info.posts_to_delete)
            return CleanupResult(candidates=info.posts_to_delete, dry_run=True)

        deleted = await self.store.delete_old_posts(days_old)
        logger.info("Cleanup completed: deleted %d posts", deleted)
        return CleanupResult(deleted=deleted, candidates=info.posts_to_delete)

    async def get_cleanup_stats(self, days_old: int = 30) -> dict[str, Any]:
        """Return database counters together with what a sweep would remove."""
        stats = await self.store.get_stats()
        info = await self.store.get_old_posts_info(days_old)
        return {
            "database": stats.model_dump(by_alias=True),
            "cleanup": info.model_dump(by_alias=True),
        }
