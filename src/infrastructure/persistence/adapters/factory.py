"""Adapter factories: entity name → DatabaseDelegate, per store technology.

Entity names are resolved case-insensitively: binding tables are keyed by
the lower-cased name and every lookup lower-cases its argument, so "User",
"user" and "USER" resolve to the same binding.

Binding tables are explicit mappings built at wiring time.  An unknown name
fails with UnknownEntityError listing every bound name.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.exceptions import UnknownEntityError, UnsupportedBackendError
from src.domain.models.enums import DatabaseBackend
from src.domain.models.posts import Post
from src.domain.models.users import User
from src.domain.repositories.delegate import DatabaseAdapterFactory, DatabaseDelegate
from src.infrastructure.database import Settings, build_engine, build_session_factory
from src.infrastructure.persistence.models import Post as OrmPost
from src.infrastructure.persistence.models import User as OrmUser

from .memory import InMemoryStore, MemoryDelegate, MemoryTable, Relation
from .sql import BoundSessionScope, ModelBinding, SqlAlchemyDelegate, autocommit_scope

logger = logging.getLogger(__name__)


def default_bindings() -> dict[str, ModelBinding]:
    return {
        "User": ModelBinding(orm_model=OrmUser, schema=User),
        "Post": ModelBinding(orm_model=OrmPost, schema=Post),
    }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_memory_tables() -> dict[str, MemoryTable]:
    return {
        "user": MemoryTable(
            schema=User,
            unique=("email",),
            relations={
                "posts": Relation(target="post", local_key="id", remote_key="author_id", many=True),
            },
        ),
        "post": MemoryTable(
            schema=Post,
            defaults={
                "create_at": _utcnow,
                "update_at": _utcnow,
                "published": lambda: False,
                "view_count": lambda: 0,
            },
            on_update={"update_at": _utcnow},
            relations={
                "author": Relation(target="user", local_key="author_id", remote_key="id", many=False),
            },
        ),
    }


class SqlAlchemyAdapterFactory(DatabaseAdapterFactory):
    """Binds entity names to SqlAlchemyDelegates.

    Without a session, each delegate call runs in its own short transaction.
    A factory built with session= is transaction-bound: all of its delegates
    share that session (see transaction()).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bindings: Mapping[str, ModelBinding] | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._bindings = {
            name.lower(): binding for name, binding in (bindings or default_bindings()).items()
        }
        self._session = session
        self._scope = (
            BoundSessionScope(session) if session is not None else autocommit_scope(session_factory)
        )

    def create_adapter(self, entity_name: str) -> DatabaseDelegate:
        binding = self._bindings.get(entity_name.lower())
        if binding is None:
            raise UnknownEntityError(entity_name, self._bindings)
        logger.debug("Resolved %s to %s", entity_name, binding.orm_model.__name__)
        return SqlAlchemyDelegate(
            entity_name, binding, self._scope, savepoints=self._session is not None
        )

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlAlchemyAdapterFactory]:
        if self._session is not None:
            yield self
            return
        async with self._session_factory() as session:
            async with session.begin():
                logger.debug("Transaction opened")
                yield SqlAlchemyAdapterFactory(
                    self._session_factory, self._bindings, session=session
                )


class MemoryAdapterFactory(DatabaseAdapterFactory):
    """Binds entity names to MemoryDelegates over one InMemoryStore."""

    def __init__(
        self,
        store: InMemoryStore | None = None,
        *,
        transaction_guard: asyncio.Lock | None = None,
    ) -> None:
        self._store = store if store is not None else InMemoryStore(default_memory_tables())
        self._transaction_guard = transaction_guard

    @property
    def store(self) -> InMemoryStore:
        return self._store

    def create_adapter(self, entity_name: str) -> DatabaseDelegate:
        if entity_name.lower() not in self._store.tables:
            raise UnknownEntityError(entity_name, self._store.tables)
        guard = self._transaction_guard if self._transaction_guard is not None else self._store.lock
        return MemoryDelegate(entity_name, self._store, guard)

    @property
    def in_transaction(self) -> bool:
        return self._transaction_guard is not None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[MemoryAdapterFactory]:
        if self._transaction_guard is not None:
            yield self
            return
        async with self._store.transaction():
            logger.debug("Transaction opened")
            yield MemoryAdapterFactory(self._store, transaction_guard=asyncio.Lock())


def create_adapter_factory(
    settings: Settings,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    store: InMemoryStore | None = None,
) -> DatabaseAdapterFactory:
    """Build the adapter factory for the configured backend.

    Raises UnsupportedBackendError when settings.database_backend names a
    store technology without an adapter.
    """
    backend = settings.database_backend.lower()
    if backend == DatabaseBackend.SQLALCHEMY:
        if session_factory is None:
            session_factory = build_session_factory(build_engine(settings))
        return SqlAlchemyAdapterFactory(session_factory)
    if backend == DatabaseBackend.MEMORY:
        return MemoryAdapterFactory(store)
    raise UnsupportedBackendError(
        settings.database_backend, [member.value for member in DatabaseBackend]
    )
