"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the adapter factories, repository implementations and the DI
factory.
"""

from src.infrastructure.persistence.adapters import (
    InMemoryStore,
    MemoryAdapterFactory,
    SqlAlchemyAdapterFactory,
    create_adapter_factory,
)
from src.infrastructure.persistence.models import *  # noqa: F401, F403
from src.infrastructure.persistence.models import __all__ as _orm_all
from src.infrastructure.persistence.repositories import (
    DelegatePostRepository,
    DelegateUserRepository,
    Repositories,
    get_repositories,
)

__all__ = _orm_all + [
    "InMemoryStore",
    "MemoryAdapterFactory",
    "SqlAlchemyAdapterFactory",
    "create_adapter_factory",
    "DelegatePostRepository",
    "DelegateUserRepository",
    "Repositories",
    "get_repositories",
]
