"""Delegate-backed implementation of PostRepository."""

from __future__ import annotations

from typing import Any

from src.domain.models.posts import Post, PostCreate, PostUpdate
from src.domain.models.query import QueryOptions
from src.domain.repositories.posts import PostRepository

from .base import TransactionalBaseRepository


def _narrowed(options: QueryOptions | None, **where: Any) -> QueryOptions:
    options = options or QueryOptions()
    return options.model_copy(update={"where": {**(options.where or {}), **where}})


class DelegatePostRepository(
    TransactionalBaseRepository[Post, PostCreate, PostUpdate], PostRepository
):
    entity_name = "Post"

    async def find_by_author(
        self, author_id: int, options: QueryOptions | None = None
    ) -> list[Post]:
        return await self.find_all(_narrowed(options, author_id=author_id))

    async def find_published(self, options: QueryOptions | None = None) -> list[Post]:
        return await self.find_all(_narrowed(options, published=True))
