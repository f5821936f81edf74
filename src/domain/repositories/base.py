"""Generic repository interfaces.

Repository[T, CreateT, UpdateT] is the root abstraction for all data-access
interfaces in this domain layer.  The implementation in
src/infrastructure/persistence/repositories/ is written only in terms of the
DatabaseDelegate contract, so the same code runs on every store technology.

Design notes:
  - All methods are async to accommodate async database drivers.
  - T is the domain model type; CreateT / UpdateT are the write payloads
    (pydantic models or plain mappings).
  - Failures raised by the store (NotFoundError, ConstraintViolationError)
    propagate unchanged; translating them is the service layer's job.
  - Soft delete is a separate capability (SoftDeleteRepository), not an
    optional method on the base contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from src.domain.models.query import BatchResult, PaginatedResult, QueryOptions

T = TypeVar("T")
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")
R = TypeVar("R")


class Repository(ABC, Generic[T, CreateT, UpdateT]):
    """Abstract CRUD and query interface for one entity type."""

    # --- single reads ---

    @abstractmethod
    async def find_by_id(self, id: int | str) -> T | None:
        """Return the entity with the given identity, or None."""

    @abstractmethod
    async def find_one(self, where: dict[str, Any]) -> T | None:
        """Return the first entity matching where, or None."""

    @abstractmethod
    async def find_one_with_options(self, options: QueryOptions | None = None) -> T | None:
        """Return the first entity matching the full query options, or None."""

    # --- multi reads ---

    @abstractmethod
    async def find_all(self, options: QueryOptions | None = None) -> list[T]:
        """Return every entity matching options."""

    @abstractmethod
    async def find_many(self, where: dict[str, Any]) -> list[T]:
        """Return every entity matching a plain equality condition."""

    @abstractmethod
    async def find_many_with_options(self, options: QueryOptions | None = None) -> list[T]:
        """Return every entity matching options (alias of find_all)."""

    @abstractmethod
    async def find_all_paginated(self, options: QueryOptions | None = None) -> PaginatedResult[T]:
        """Return one page of entities plus total-count metadata."""

    # --- counting and existence ---

    @abstractmethod
    async def count(self, where: dict[str, Any] | None = None) -> int:
        """Return the number of entities matching where."""

    @abstractmethod
    async def exists(self, id: int | str) -> bool:
        """Return True when an entity with the given identity exists."""

    @abstractmethod
    async def exists_by(self, where: dict[str, Any]) -> bool:
        """Return True when an entity matching where exists."""

    # --- writes ---

    @abstractmethod
    async def create(self, data: CreateT) -> T:
        """Persist a new entity and return it (with generated fields populated)."""

    @abstractmethod
    async def create_many(self, data: list[CreateT]) -> BatchResult:
        """Persist several entities and return how many were created."""

    @abstractmethod
    async def update(self, id: int | str, data: UpdateT) -> T:
        """Apply data to the entity with the given identity and return it."""

    @abstractmethod
    async def update_many(self, where: dict[str, Any], data: UpdateT) -> BatchResult:
        """Apply data to every entity matching where."""

    @abstractmethod
    async def upsert(self, where: dict[str, Any], create: CreateT, update: UpdateT) -> T:
        """Update the entity matching where, or create it, atomically."""

    @abstractmethod
    async def delete(self, id: int | str) -> None:
        """Remove the entity with the given identity."""

    @abstractmethod
    async def delete_many(self, where: dict[str, Any]) -> BatchResult:
        """Remove every entity matching where."""

    # --- utilities ---

    @abstractmethod
    async def refresh(self, entity: T) -> T | None:
        """Re-read entity by its own identity field."""


class TransactionalRepository(Repository[T, CreateT, UpdateT]):
    """Repository that can run a unit of work inside one store transaction."""

    @abstractmethod
    async def with_transaction(
        self,
        callback: Callable[[Repository[T, CreateT, UpdateT]], Awaitable[R]],
    ) -> R:
        """Run callback with a transaction-bound repository.

        Commits when callback returns, rolls back and re-raises when it fails.
        """


class SoftDeleteRepository(ABC, Generic[T]):
    """Extension capability: mark an entity deleted without removing it."""

    @abstractmethod
    async def soft_delete(self, id: int | str) -> T:
        """Flag the entity as deleted and return its updated state."""
