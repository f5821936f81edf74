"""Post repository interface."""

from __future__ import annotations

from abc import abstractmethod

from src.domain.models.posts import Post, PostCreate, PostUpdate
from src.domain.models.query import QueryOptions

from .base import TransactionalRepository


class PostRepository(TransactionalRepository[Post, PostCreate, PostUpdate]):
    """Read/write interface for Post entities."""

    @abstractmethod
    async def find_by_author(
        self, author_id: int, options: QueryOptions | None = None
    ) -> list[Post]:
        """Return the author's posts; options may add ordering or a window."""

    @abstractmethod
    async def find_published(self, options: QueryOptions | None = None) -> list[Post]:
        """Return published posts only."""
