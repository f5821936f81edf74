"""Tests for SoftDeleteMixin over a memory table with a deletion timestamp."""

from datetime import datetime
from typing import Any

import pytest
from pydantic import BaseModel

from src.domain.exceptions import NotFoundError
from src.infrastructure.persistence.adapters import (
    InMemoryStore,
    MemoryAdapterFactory,
    MemoryTable,
)
from src.infrastructure.persistence.repositories import BaseRepository, SoftDeleteMixin


class Article(BaseModel):
    id: int
    title: str
    deleted_at: datetime | None = None


class ArticleRepository(SoftDeleteMixin[Article], BaseRepository[Article, Any, Any]):
    entity_name = "Article"


def _repo():
    store = InMemoryStore({"article": MemoryTable(schema=Article)})
    return ArticleRepository(MemoryAdapterFactory(store))


async def test_soft_delete_sets_timestamp():
    repo = _repo()
    article = await repo.create({"title": "hello"})
    deleted = await repo.soft_delete(article.id)
    assert deleted.deleted_at is not None


async def test_soft_delete_keeps_the_record():
    repo = _repo()
    article = await repo.create({"title": "hello"})
    await repo.soft_delete(article.id)
    assert await repo.exists(article.id) is True


async def test_soft_delete_missing_record_raises_not_found():
    with pytest.raises(NotFoundError):
        await _repo().soft_delete(99)
