"""Store-facing contracts: the Database Delegate and the Adapter Factory.

DatabaseDelegate is the minimal operation set one entity's store must expose
for the generic repository to work on top of it.  DatabaseAdapterFactory is
the seam where the store technology is chosen: it resolves a logical entity
name ("User", "Post") to a Delegate bound to that technology.

Design notes:
  - All Delegate methods are async; they may suspend on I/O.
  - Option keywords (where, include, select, order_by, skip, take) are only
    passed when the caller supplied them.  Implementations must treat an
    omitted keyword as "unconstrained".
  - Delegates raise NotFoundError / ConstraintViolationError from
    src.domain.exceptions; driver exceptions never leak past them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

from src.domain.models.query import BatchResult, SortOptions


class DatabaseDelegate(ABC):
    """Operations one named entity's store supports."""

    @abstractmethod
    async def find_unique(
        self,
        *,
        where: Mapping[str, Any],
        select: Mapping[str, bool] | None = None,
    ) -> Any | None:
        """Return the record identified by where, or None.

        where should identify at most one record.  When it does not, the
        first match in primary-key order is returned.
        """

    @abstractmethod
    async def find_first(
        self,
        *,
        where: Mapping[str, Any] | None = None,
        include: Mapping[str, Any] | None = None,
        select: Mapping[str, bool] | None = None,
        order_by: Sequence[SortOptions] | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> Any | None:
        """Return the first matching record, or None."""

    @abstractmethod
    async def find_many(
        self,
        *,
        where: Mapping[str, Any] | None = None,
        include: Mapping[str, Any] | None = None,
        select: Mapping[str, bool] | None = None,
        order_by: Sequence[SortOptions] | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any]:
        """Return every matching record inside the skip/take window."""

    @abstractmethod
    async def count(self, *, where: Mapping[str, Any] | None = None) -> int:
        """Return the number of matching records."""

    @abstractmethod
    async def create(self, *, data: Mapping[str, Any]) -> Any:
        """Insert a record and return it with generated fields populated."""

    @abstractmethod
    async def create_many(self, *, data: Sequence[Mapping[str, Any]]) -> BatchResult:
        """Insert several records in one call."""

    @abstractmethod
    async def update(self, *, where: Mapping[str, Any], data: Mapping[str, Any]) -> Any:
        """Apply data to the single matching record.  Raises NotFoundError."""

    @abstractmethod
    async def update_many(
        self, *, where: Mapping[str, Any], data: Mapping[str, Any]
    ) -> BatchResult:
        """Apply data to every matching record; a count of 0 is not an error."""

    @abstractmethod
    async def upsert(
        self,
        *,
        where: Mapping[str, Any],
        create: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> Any:
        """Update the record matching where, or create one, atomically."""

    @abstractmethod
    async def delete(self, *, where: Mapping[str, Any]) -> Any:
        """Delete the matching record and return its last state.  Raises NotFoundError."""

    @abstractmethod
    async def delete_many(self, *, where: Mapping[str, Any] | None = None) -> BatchResult:
        """Delete every matching record; a count of 0 is not an error."""


class DatabaseAdapterFactory(ABC):
    """Resolves entity names to Delegates for one store technology."""

    @abstractmethod
    def create_adapter(self, entity_name: str) -> DatabaseDelegate:
        """Return the Delegate bound to entity_name.  Raises UnknownEntityError."""

    def create_user_adapter(self) -> DatabaseDelegate:
        return self.create_adapter("User")

    def create_post_adapter(self) -> DatabaseDelegate:
        return self.create_adapter("Post")

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """True when this factory's Delegates are bound to an open transaction."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[DatabaseAdapterFactory]:
        """Open a transaction and yield a factory bound to it.

        The transaction commits when the block exits normally and rolls back
        when it exits with an exception (which is re-raised).
        """
