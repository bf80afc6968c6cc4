"""Domain exceptions raised by the chat core and its store."""

from __future__ import annotations


class GroupdeedoError(Exception):
    """Base class for application errors."""


class PostNotFoundError(GroupdeedoError):
    """Raised when an operation targets a post that does not exist."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"Post not found: {post_id}")
        self.post_id = post_id


class StoreError(GroupdeedoError):
    """Raised when the persistence layer fails to complete an operation."""
