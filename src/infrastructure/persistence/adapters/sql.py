"""SQLAlchemy implementation of the DatabaseDelegate contract.

One SqlAlchemyDelegate serves one ORM model.  It translates the store-agnostic
options (where / include / select / order_by / skip / take) into SQLAlchemy
2.0 statements and maps ORM rows to the entity's pydantic schema.

Sessions come from a SessionScope:
  - autocommit_scope: every call opens its own session and commits on
    success, so independent reads can run concurrently.
  - BoundSessionScope: every call reuses one transaction's session; calls are
    serialized because an AsyncSession is not safe for concurrent use.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator, Mapping, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Any

import sqlalchemy as sa
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapper, selectinload

from src.domain.exceptions import ConstraintViolationError, InvalidQueryError, NotFoundError
from src.domain.models.enums import SortDirection
from src.domain.models.query import BatchResult, SortOptions
from src.domain.repositories.delegate import DatabaseDelegate
from src.infrastructure.database import Base

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass(frozen=True)
class ModelBinding:
    """Pairs an ORM model with the pydantic schema its rows are returned as."""

    orm_model: type[Base]
    schema: type[BaseModel]


def autocommit_scope(session_factory: async_sessionmaker[AsyncSession]) -> SessionScope:
    @asynccontextmanager
    async def scope() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            async with session.begin():
                yield session

    return scope


class BoundSessionScope:
    """Hands one transaction's session to one caller at a time."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[AsyncSession]:
        async with self._lock:
            yield self._session


def _to_record(mapper: Mapper, row: Any, include: Mapping[str, Any] | None) -> dict[str, Any]:
    record = {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs}
    for name, option in (include or {}).items():
        if not option:
            continue
        relationship = mapper.relationships[name]
        nested = option.get("include") if isinstance(option, Mapping) else None
        value = getattr(row, name)
        if relationship.uselist:
            record[name] = [_to_record(relationship.mapper, item, nested) for item in value]
        else:
            record[name] = (
                _to_record(relationship.mapper, value, nested) if value is not None else None
            )
    return record


class SqlAlchemyDelegate(DatabaseDelegate):
    """Delegate over one ORM model.

    savepoints=True is for delegates sharing a caller's transaction: each
    write runs under a SAVEPOINT so a failed statement is rolled back alone
    and the transaction stays usable.
    """

    def __init__(
        self,
        entity_name: str,
        binding: ModelBinding,
        scope: SessionScope,
        *,
        savepoints: bool = False,
    ) -> None:
        self._entity_name = entity_name
        self._model = binding.orm_model
        self._schema = binding.schema
        self._mapper: Mapper = sa.inspect(binding.orm_model)
        self._identity = tuple(
            self._mapper.get_property_by_column(column).key for column in self._mapper.primary_key
        )
        self._scope = scope
        self._savepoints = savepoints

    # ------------------------------------------------------------------ #
    # Statement building                                                   #
    # ------------------------------------------------------------------ #

    def _column(self, field: str) -> Any:
        if field not in self._mapper.column_attrs:
            raise InvalidQueryError(
                f"Unknown field '{field}' on {self._entity_name}",
                entity_name=self._entity_name,
            )
        return getattr(self._model, field)

    def _conditions(self, where: Mapping[str, Any] | None) -> list[Any]:
        conditions = []
        for field, value in (where or {}).items():
            column = self._column(field)
            conditions.append(column.is_(None) if value is None else column == value)
        return conditions

    def _ordering(self, order_by: Sequence[SortOptions] | None) -> list[Any]:
        clauses = []
        for sort in order_by or ():
            column = self._column(sort.field)
            clauses.append(column.desc() if sort.direction == SortDirection.DESC else column.asc())
        # Primary key is always the final tie-break so windows are stable.
        clauses.extend(column.asc() for column in self._mapper.primary_key)
        return clauses

    def _loaders(self, mapper: Mapper, include: Mapping[str, Any]) -> list[Any]:
        loaders = []
        for name, option in include.items():
            if not option:
                continue
            if name not in mapper.relationships:
                raise InvalidQueryError(
                    f"Unknown relation '{name}' on {mapper.class_.__name__}",
                    entity_name=self._entity_name,
                )
            relationship = mapper.relationships[name]
            loader = selectinload(getattr(mapper.class_, name))
            nested = option.get("include") if isinstance(option, Mapping) else None
            if nested:
                loader = loader.options(*self._loaders(relationship.mapper, nested))
            loaders.append(loader)
        return loaders

    def _values(self, data: Mapping[str, Any]) -> dict[str, Any]:
        for field in data:
            self._column(field)
        return dict(data)

    def _to_domain(self, row: Any, include: Mapping[str, Any] | None = None) -> BaseModel:
        return self._schema.model_validate(_to_record(self._mapper, row, include))

    @contextmanager
    def _integrity(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            raise ConstraintViolationError(
                self._entity_name, operation, detail=str(exc.orig)
            ) from exc

    @asynccontextmanager
    async def _statement(self, session: AsyncSession, operation: str) -> AsyncIterator[None]:
        with self._integrity(operation):
            if self._savepoints:
                async with session.begin_nested():
                    yield
            else:
                yield

    async def _select(
        self,
        session: AsyncSession,
        *,
        where: Mapping[str, Any] | None = None,
        include: Mapping[str, Any] | None = None,
        select: Mapping[str, bool] | None = None,
        order_by: Sequence[SortOptions] | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any]:
        if include and select:
            raise InvalidQueryError(
                "Use either include or select, not both", entity_name=self._entity_name
            )
        if select:
            fields = [field for field, wanted in select.items() if wanted]
            if not fields:
                raise InvalidQueryError(
                    "select must enable at least one field", entity_name=self._entity_name
                )
            stmt = sa.select(*(self._column(field) for field in fields))
        else:
            # Rows already in a shared session may predate a bulk write.
            stmt = sa.select(self._model).execution_options(populate_existing=True)
            if include:
                stmt = stmt.options(*self._loaders(self._mapper, include))
        stmt = stmt.where(*self._conditions(where)).order_by(*self._ordering(order_by))
        if skip is not None:
            stmt = stmt.offset(skip)
        if take is not None:
            stmt = stmt.limit(take)

        result = await session.execute(stmt)
        if select:
            # Projections are partial entities: only the selected attributes are set.
            return [self._schema.model_construct(**row._asdict()) for row in result]
        return [self._to_domain(row, include) for row in result.scalars()]

    async def _first_row(
        self, session: AsyncSession, where: Mapping[str, Any], *, lock: bool = False
    ) -> Any | None:
        stmt = (
            sa.select(self._model)
            .where(*self._conditions(where))
            .order_by(*self._ordering(None))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _write_row(
        self, session: AsyncSession, row: Any, data: Mapping[str, Any], operation: str
    ) -> BaseModel:
        values = self._values(data)
        for field in self._identity:
            if field in values and values[field] != getattr(row, field):
                raise InvalidQueryError(
                    "The identity field cannot be changed", entity_name=self._entity_name
                )
        async with self._statement(session, operation):
            for field, value in values.items():
                setattr(row, field, value)
            await session.flush()
        await session.refresh(row)
        return self._to_domain(row)

    async def _insert_row(
        self, session: AsyncSession, data: Mapping[str, Any], operation: str
    ) -> BaseModel:
        row = self._model(**self._values(data))
        async with self._statement(session, operation):
            session.add(row)
            await session.flush()
        await session.refresh(row)
        return self._to_domain(row)

    # ------------------------------------------------------------------ #
    # DatabaseDelegate                                                     #
    # ------------------------------------------------------------------ #

    async def find_unique(
        self,
        *,
        where: Mapping[str, Any],
        select: Mapping[str, bool] | None = None,
    ) -> Any | None:
        async with self._scope() as session:
            rows = await self._select(session, where=where, select=select, take=1)
        return rows[0] if rows else None

    async def find_first(self, **options: Any) -> Any | None:
        options["take"] = 1 if options.get("take") is None else min(options["take"], 1)
        async with self._scope() as session:
            rows = await self._select(session, **options)
        return rows[0] if rows else None

    async def find_many(self, **options: Any) -> list[Any]:
        async with self._scope() as session:
            return await self._select(session, **options)

    async def count(self, *, where: Mapping[str, Any] | None = None) -> int:
        stmt = sa.select(sa.func.count()).select_from(self._model).where(*self._conditions(where))
        async with self._scope() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def create(self, *, data: Mapping[str, Any]) -> Any:
        async with self._scope() as session:
            return await self._insert_row(session, data, "create")

    async def create_many(self, *, data: Sequence[Mapping[str, Any]]) -> BatchResult:
        rows = [self._values(item) for item in data]
        if not rows:
            return BatchResult(count=0)
        async with self._scope() as session:
            async with self._statement(session, "create_many"):
                await session.execute(sa.insert(self._model), rows)
        return BatchResult(count=len(rows))

    async def update(self, *, where: Mapping[str, Any], data: Mapping[str, Any]) -> Any:
        async with self._scope() as session:
            row = await self._first_row(session, where)
            if row is None:
                raise NotFoundError(self._entity_name, dict(where), "update")
            return await self._write_row(session, row, data, "update")

    async def update_many(
        self, *, where: Mapping[str, Any], data: Mapping[str, Any]
    ) -> BatchResult:
        values = self._values(data)
        if not values:
            return BatchResult(count=await self.count(where=where))
        stmt = (
            sa.update(self._model)
            .where(*self._conditions(where))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._scope() as session:
            async with self._statement(session, "update_many"):
                result = await session.execute(stmt)
        return BatchResult(count=result.rowcount)

    async def upsert(
        self,
        *,
        where: Mapping[str, Any],
        create: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> Any:
        # Lookup and write share one session transaction; the row lock keeps
        # concurrent upserts on the same key from both taking the create branch
        # on backends that support FOR UPDATE.
        async with self._scope() as session:
            row = await self._first_row(session, where, lock=True)
            if row is None:
                return await self._insert_row(session, create, "upsert")
            return await self._write_row(session, row, update, "upsert")

    async def delete(self, *, where: Mapping[str, Any]) -> Any:
        async with self._scope() as session:
            row = await self._first_row(session, where)
            if row is None:
                raise NotFoundError(self._entity_name, dict(where), "delete")
            snapshot = self._to_domain(row)
            async with self._statement(session, "delete"):
                await session.delete(row)
                await session.flush()
        return snapshot

    async def delete_many(self, *, where: Mapping[str, Any] | None = None) -> BatchResult:
        stmt = (
            sa.delete(self._model)
            .where(*self._conditions(where))
            .execution_options(synchronize_session=False)
        )
        async with self._scope() as session:
            async with self._statement(session, "delete_many"):
                result = await session.execute(stmt)
        return BatchResult(count=result.rowcount)


