"""In-memory implementation of the DatabaseDelegate contract.

Tables hold plain dict records keyed by an auto-incremented integer id.  Each
table declares its pydantic schema, unique fields, column defaults and
relations; records are validated against the schema on every write, so a
missing required field behaves like a NOT NULL violation.  A many-to-one
relation acts as a foreign key: its local key must name an existing row.

Concurrency: a store-wide asyncio.Lock serializes ambient calls and is held
for the whole life of a transaction.  A transaction snapshots every table on
entry and restores the snapshot when the block raises.  Calling an ambient
(non-transaction-bound) delegate from inside a transaction on the same store
therefore waits until that transaction ends.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from src.domain.exceptions import ConstraintViolationError, InvalidQueryError, NotFoundError
from src.domain.models.enums import SortDirection
from src.domain.models.query import BatchResult, SortOptions
from src.domain.repositories.delegate import DatabaseDelegate

Record = dict[str, Any]


@dataclass(frozen=True)
class Relation:
    """Link from one table to another.

    many=True is a one-to-many link owned by the target's remote_key (e.g.
    user.posts via post.author_id); deleting the owner nulls remote_key on
    the target rows.  many=False is the inverse many-to-one link.
    """

    target: str
    local_key: str
    remote_key: str
    many: bool


@dataclass(frozen=True)
class MemoryTable:
    schema: type[BaseModel]
    unique: tuple[str, ...] = ()
    defaults: Mapping[str, Callable[[], Any]] = field(default_factory=dict)
    on_update: Mapping[str, Callable[[], Any]] = field(default_factory=dict)
    relations: Mapping[str, Relation] = field(default_factory=dict)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(name for name in self.schema.model_fields if name not in self.relations)


class InMemoryStore:
    def __init__(self, tables: Mapping[str, MemoryTable]) -> None:
        self.tables = {name.lower(): table for name, table in tables.items()}
        self._rows: dict[str, dict[int, Record]] = {name: {} for name in self.tables}
        self._sequences: dict[str, int] = {name: 0 for name in self.tables}
        self.lock = asyncio.Lock()

    def rows(self, table: str) -> dict[int, Record]:
        return self._rows[table]

    def next_id(self, table: str) -> int:
        self._sequences[table] += 1
        return self._sequences[table]

    def reserve_id(self, table: str, value: int) -> None:
        self._sequences[table] = max(self._sequences[table], value)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self.lock:
            snapshot = copy.deepcopy((self._rows, self._sequences))
            try:
                yield
            except BaseException:
                self._rows, self._sequences = snapshot
                raise


class MemoryDelegate(DatabaseDelegate):
    def __init__(
        self,
        entity_name: str,
        store: InMemoryStore,
        guard: asyncio.Lock,
    ) -> None:
        self._entity_name = entity_name
        self._store = store
        self._table_name = entity_name.lower()
        self._table = store.tables[self._table_name]
        self._guard = guard

    # ------------------------------------------------------------------ #
    # Record helpers (synchronous: a call never yields mid-mutation)       #
    # ------------------------------------------------------------------ #

    def _check_fields(self, fields: Sequence[str] | Mapping[str, Any]) -> None:
        columns = self._table.columns
        for name in fields:
            if name not in columns:
                raise InvalidQueryError(
                    f"Unknown field '{name}' on {self._entity_name}",
                    entity_name=self._entity_name,
                )

    def _matching(self, where: Mapping[str, Any] | None) -> list[Record]:
        where = where or {}
        self._check_fields(where)
        rows = self._store.rows(self._table_name)
        return [
            record
            for _, record in sorted(rows.items())
            if all(record.get(name) == value for name, value in where.items())
        ]

    def _sorted(self, records: list[Record], order_by: Sequence[SortOptions] | None) -> list[Record]:
        # Records arrive in id order; stable sorts from the least significant
        # key up leave the first order_by entry as the primary key.
        for sort in reversed(list(order_by or ())):
            self._check_fields([sort.field])
            records = sorted(
                records,
                key=lambda record, name=sort.field: (record[name] is None, record[name]),
                reverse=sort.direction == SortDirection.DESC,
            )
        return records

    def _related(self, relation: Relation, record: Record) -> list[Record]:
        key = record.get(relation.local_key)
        if key is None:
            return []
        rows = self._store.rows(relation.target)
        return [
            other for _, other in sorted(rows.items()) if other.get(relation.remote_key) == key
        ]

    def _shape(self, table: MemoryTable, record: Record, include: Mapping[str, Any] | None) -> Record:
        shaped = {name: record[name] for name in table.columns}
        for name, option in (include or {}).items():
            if not option:
                continue
            if name not in table.relations:
                raise InvalidQueryError(
                    f"Unknown relation '{name}' on {table.schema.__name__}",
                    entity_name=self._entity_name,
                )
            relation = table.relations[name]
            target = self._store.tables[relation.target]
            nested = option.get("include") if isinstance(option, Mapping) else None
            related = [self._shape(target, other, nested) for other in self._related(relation, record)]
            shaped[name] = related if relation.many else (related[0] if related else None)
        return shaped

    def _to_domain(self, record: Record, include: Mapping[str, Any] | None = None) -> BaseModel:
        return self._table.schema.model_validate(self._shape(self._table, record, include))

    def _validated(self, record: Record, operation: str) -> Record:
        try:
            self._table.schema.model_validate(record)
        except ValidationError as exc:
            raise ConstraintViolationError(
                self._entity_name,
                operation,
                fields=[".".join(str(part) for part in error["loc"]) for error in exc.errors()],
                detail="record does not satisfy the table schema",
            ) from exc
        return record

    def _check_unique(self, candidate: Record, operation: str) -> None:
        rows = self._store.rows(self._table_name)
        for name in ("id", *self._table.unique):
            value = candidate.get(name)
            if value is None:
                continue
            for record_id, record in rows.items():
                if record_id != candidate["id"] and record.get(name) == value:
                    raise ConstraintViolationError(
                        self._entity_name,
                        operation,
                        fields=[name],
                        detail=f"duplicate value {value!r}",
                    )

    def _check_references(self, record: Record, operation: str) -> None:
        for relation in self._table.relations.values():
            value = record.get(relation.local_key)
            if relation.many or value is None:
                continue
            targets = self._store.rows(relation.target).values()
            if not any(other.get(relation.remote_key) == value for other in targets):
                raise ConstraintViolationError(
                    self._entity_name,
                    operation,
                    fields=[relation.local_key],
                    detail=f"no {relation.target} with {relation.remote_key}={value!r}",
                )

    def _insert(self, data: Mapping[str, Any], operation: str) -> Record:
        self._check_fields(data)
        record: Record = {name: None for name in self._table.columns}
        record.update({name: factory() for name, factory in self._table.defaults.items()})
        record.update(data)
        if record.get("id") is None:
            record["id"] = self._store.next_id(self._table_name)
        elif record["id"] in self._store.rows(self._table_name):
            raise ConstraintViolationError(
                self._entity_name, operation, fields=["id"], detail=f"duplicate id {record['id']!r}"
            )
        self._check_unique(record, operation)
        self._check_references(record, operation)
        return self._validated(record, operation)

    def _changed(self, record: Record, data: Mapping[str, Any], operation: str) -> Record:
        self._check_fields(data)
        changed = {**record, **{name: factory() for name, factory in self._table.on_update.items()}}
        changed.update(data)
        if changed["id"] != record["id"]:
            raise InvalidQueryError(
                "The identity field cannot be changed", entity_name=self._entity_name
            )
        self._check_unique(changed, operation)
        self._check_references(changed, operation)
        return self._validated(changed, operation)

    def _store_record(self, record: Record) -> None:
        self._store.rows(self._table_name)[record["id"]] = record
        self._store.reserve_id(self._table_name, record["id"])

    def _remove(self, record: Record) -> None:
        del self._store.rows(self._table_name)[record["id"]]
        for relation in self._table.relations.values():
            if relation.many:
                for other in self._related(relation, record):
                    other[relation.remote_key] = None

    def _select(
        self,
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
        records = self._sorted(self._matching(where), order_by)
        if skip is not None:
            records = records[skip:]
        if take is not None:
            records = records[:take]
        if select:
            fields = [name for name, wanted in select.items() if wanted]
            if not fields:
                raise InvalidQueryError(
                    "select must enable at least one field", entity_name=self._entity_name
                )
            self._check_fields(fields)
            return [
                self._table.schema.model_construct(**{name: record[name] for name in fields})
                for record in records
            ]
        return [self._to_domain(record, include) for record in records]

    # ------------------------------------------------------------------ #
    # DatabaseDelegate                                                     #
    # ------------------------------------------------------------------ #

    async def find_unique(
        self,
        *,
        where: Mapping[str, Any],
        select: Mapping[str, bool] | None = None,
    ) -> Any | None:
        async with self._guard:
            rows = self._select(where=where, select=select, take=1)
        return rows[0] if rows else None

    async def find_first(self, **options: Any) -> Any | None:
        options["take"] = 1 if options.get("take") is None else min(options["take"], 1)
        async with self._guard:
            rows = self._select(**options)
        return rows[0] if rows else None

    async def find_many(self, **options: Any) -> list[Any]:
        async with self._guard:
            return self._select(**options)

    async def count(self, *, where: Mapping[str, Any] | None = None) -> int:
        async with self._guard:
            return len(self._matching(where))

    async def create(self, *, data: Mapping[str, Any]) -> Any:
        async with self._guard:
            record = self._insert(data, "create")
            self._store_record(record)
            return self._to_domain(record)

    async def create_many(self, *, data: Sequence[Mapping[str, Any]]) -> BatchResult:
        async with self._guard:
            inserted: list[Record] = []
            try:
                for item in data:
                    record = self._insert(item, "create_many")
                    self._store_record(record)
                    inserted.append(record)
            except (ConstraintViolationError, InvalidQueryError):
                for record in inserted:
                    del self._store.rows(self._table_name)[record["id"]]
                raise
            return BatchResult(count=len(inserted))

    async def update(self, *, where: Mapping[str, Any], data: Mapping[str, Any]) -> Any:
        async with self._guard:
            matches = self._matching(where)
            if not matches:
                raise NotFoundError(self._entity_name, dict(where), "update")
            record = self._changed(matches[0], data, "update")
            self._store_record(record)
            return self._to_domain(record)

    async def update_many(
        self, *, where: Mapping[str, Any], data: Mapping[str, Any]
    ) -> BatchResult:
        async with self._guard:
            originals = self._matching(where)
            applied: list[Record] = []
            try:
                for original in originals:
                    self._store_record(self._changed(original, data, "update_many"))
                    applied.append(original)
            except (ConstraintViolationError, InvalidQueryError):
                for original in applied:
                    self._store_record(original)
                raise
            return BatchResult(count=len(applied))

    async def upsert(
        self,
        *,
        where: Mapping[str, Any],
        create: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> Any:
        async with self._guard:
            matches = self._matching(where)
            if matches:
                record = self._changed(matches[0], update, "upsert")
            else:
                record = self._insert(create, "upsert")
            self._store_record(record)
            return self._to_domain(record)

    async def delete(self, *, where: Mapping[str, Any]) -> Any:
        async with self._guard:
            matches = self._matching(where)
            if not matches:
                raise NotFoundError(self._entity_name, dict(where), "delete")
            snapshot = self._to_domain(matches[0])
            self._remove(matches[0])
            return snapshot

    async def delete_many(self, *, where: Mapping[str, Any] | None = None) -> BatchResult:
        async with self._guard:
            matches = self._matching(where)
            for record in matches:
                self._remove(record)
            return BatchResult(count=len(matches))
