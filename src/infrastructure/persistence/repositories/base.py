"""Delegate-backed implementation of the generic repository interfaces.

BaseRepository speaks only the DatabaseDelegate vocabulary: it normalizes
QueryOptions into delegate keyword arguments, computes pagination metadata,
and otherwise passes calls straight through.  Store failures propagate
unchanged.

The delegate is resolved lazily from the adapter factory on first use and
memoized for the lifetime of the repository instance.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel

from src.domain.exceptions import InvalidQueryError
from src.domain.models.query import BatchResult, PaginatedResult, QueryOptions
from src.domain.repositories.base import (
    CreateT,
    Repository,
    SoftDeleteRepository,
    T,
    TransactionalRepository,
    UpdateT,
)
from src.domain.repositories.delegate import DatabaseAdapterFactory, DatabaseDelegate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20

R = TypeVar("R")

_QUERY_KEYS = ("where", "include", "select", "order_by", "skip", "take")


def _payload(data: Any) -> dict[str, Any]:
    """Write payloads may be pydantic models (only explicitly set fields) or mappings."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


class BaseRepository(Repository[T, CreateT, UpdateT]):
    """Generic CRUD/query surface over one entity.

    Subclasses set entity_name to the logical name the adapter factory
    resolves ("User", "Post").
    """

    entity_name: ClassVar[str]

    def __init__(
        self,
        adapter_factory: DatabaseAdapterFactory,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        if default_limit <= 0:
            raise InvalidQueryError(
                f"default_limit must be positive, got {default_limit}",
                entity_name=self.entity_name,
            )
        self._adapter_factory = adapter_factory
        self._default_limit = default_limit
        self._database: DatabaseDelegate | None = None
        self._database_lock = threading.Lock()

    @property
    def default_limit(self) -> int:
        return self._default_limit

    @property
    def adapter_factory(self) -> DatabaseAdapterFactory:
        return self._adapter_factory

    @property
    def database(self) -> DatabaseDelegate:
        if self._database is None:
            with self._database_lock:
                if self._database is None:
                    self._database = self._adapter_factory.create_adapter(self.entity_name)
        return self._database

    def _build_query_args(self, options: QueryOptions | None) -> dict[str, Any]:
        # None means "not supplied"; 0 for skip/take is a real value.
        if options is None:
            return {}
        args = {}
        for key in _QUERY_KEYS:
            value = getattr(options, key)
            if value is not None:
                args[key] = value
        return args

    # --- single reads ---

    async def find_by_id(self, id: int | str) -> T | None:
        return await self.database.find_unique(where={"id": id})

    async def find_one(self, where: dict[str, Any]) -> T | None:
        return await self.database.find_first(where=where)

    async def find_one_with_options(self, options: QueryOptions | None = None) -> T | None:
        return await self.database.find_first(**self._build_query_args(options))

    # --- multi reads ---

    async def find_all(self, options: QueryOptions | None = None) -> list[T]:
        return await self.database.find_many(**self._build_query_args(options))

    async def find_many(self, where: dict[str, Any]) -> list[T]:
        return await self.database.find_many(**self._build_query_args(QueryOptions(where=where)))

    async def find_many_with_options(self, options: QueryOptions | None = None) -> list[T]:
        return await self.database.find_many(**self._build_query_args(options))

    async def find_all_paginated(self, options: QueryOptions | None = None) -> PaginatedResult[T]:
        """Return one page plus total-count metadata.

        find_many and count are independent reads issued concurrently; a write
        committed between them can leave total and data mutually stale.
        """
        options = options or QueryOptions()
        page = options.page or 1
        limit = options.limit or self._default_limit
        skip = options.skip if options.skip is not None else (page - 1) * limit
        take = min(options.take, limit) if options.take is not None else limit

        window = options.model_copy(update={"skip": skip, "take": take})
        data, total = await asyncio.gather(
            self.database.find_many(**self._build_query_args(window)),
            self.count(options.where),
        )
        return PaginatedResult.build(data=data, total=total, page=page, limit=limit)

    # --- counting and existence ---

    async def count(self, where: dict[str, Any] | None = None) -> int:
        if where is None:
            return await self.database.count()
        return await self.database.count(where=where)

    async def exists(self, id: int | str) -> bool:
        return await self.exists_by({"id": id})

    async def exists_by(self, where: dict[str, Any]) -> bool:
        found = await self.database.find_unique(where=where, select={"id": True})
        return found is not None

    # --- writes ---

    async def create(self, data: CreateT) -> T:
        return await self.database.create(data=_payload(data))

    async def create_many(self, data: list[CreateT]) -> BatchResult:
        result = await self.database.create_many(data=[_payload(item) for item in data])
        return BatchResult(count=result.count)

    async def update(self, id: int | str, data: UpdateT) -> T:
        return await self.database.update(where={"id": id}, data=_payload(data))

    async def update_many(self, where: dict[str, Any], data: UpdateT) -> BatchResult:
        return await self.database.update_many(where=where, data=_payload(data))

    async def upsert(self, where: dict[str, Any], create: CreateT, update: UpdateT) -> T:
        return await self.database.upsert(
            where=where, create=_payload(create), update=_payload(update)
        )

    async def delete(self, id: int | str) -> None:
        await self.database.delete(where={"id": id})

    async def delete_many(self, where: dict[str, Any]) -> BatchResult:
        return await self.database.delete_many(where=where)

    # --- utilities ---

    async def refresh(self, entity: T) -> T | None:
        entity_id = entity["id"] if isinstance(entity, Mapping) else entity.id  # type: ignore[attr-defined]
        return await self.find_by_id(entity_id)


class TransactionalBaseRepository(
    BaseRepository[T, CreateT, UpdateT], TransactionalRepository[T, CreateT, UpdateT]
):
    """BaseRepository with an all-or-nothing execution scope.

    Subclasses must keep the (adapter_factory, default_limit) constructor
    signature: the transaction-bound clone is built through it.
    """

    def _bind(
        self, adapter_factory: DatabaseAdapterFactory
    ) -> TransactionalBaseRepository[T, CreateT, UpdateT]:
        return type(self)(adapter_factory, default_limit=self._default_limit)

    async def with_transaction(
        self,
        callback: Callable[[Repository[T, CreateT, UpdateT]], Awaitable[R]],
    ) -> R:
        # Already transaction-bound: join the outer transaction.
        if self._adapter_factory.in_transaction:
            return await callback(self)

        async with self._adapter_factory.transaction() as bound_factory:
            try:
                result = await callback(self._bind(bound_factory))
            except Exception:
                logger.warning("Rolling back %s transaction", self.entity_name)
                raise
        logger.debug("Committed %s transaction", self.entity_name)
        return result


class SoftDeleteMixin(SoftDeleteRepository[T]):
    """soft_delete() for repositories whose entity carries a deletion timestamp."""

    soft_delete_field: ClassVar[str] = "deleted_at"

    database: DatabaseDelegate

    async def soft_delete(self, id: int | str) -> T:
        return await self.database.update(
            where={"id": id},
            data={self.soft_delete_field: datetime.now(timezone.utc)},
        )
