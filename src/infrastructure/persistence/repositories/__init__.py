"""Delegate-backed repository implementations.

Exports the generic BaseRepository / TransactionalBaseRepository, the
entity repositories, and the get_repositories() factory function for wiring
at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.repositories.delegate import DatabaseAdapterFactory

from .base import DEFAULT_LIMIT, BaseRepository, SoftDeleteMixin, TransactionalBaseRepository
from .posts import DelegatePostRepository
from .users import DelegateUserRepository


@dataclass
class Repositories:
    """All repository instances sharing one adapter factory."""

    users: DelegateUserRepository
    posts: DelegatePostRepository


def get_repositories(
    adapter_factory: DatabaseAdapterFactory,
    default_limit: int = DEFAULT_LIMIT,
) -> Repositories:
    """Construct all repositories bound to the given adapter factory.

    Intended to run once at wiring time:

        settings = get_settings()
        repos = get_repositories(
            create_adapter_factory(settings), settings.default_page_size
        )
        user = await repos.users.find_by_email("a@x.com")
    """
    return Repositories(
        users=DelegateUserRepository(adapter_factory, default_limit=default_limit),
        posts=DelegatePostRepository(adapter_factory, default_limit=default_limit),
    )


__all__ = [
    "DEFAULT_LIMIT",
    "BaseRepository",
    "TransactionalBaseRepository",
    "SoftDeleteMixin",
    "DelegateUserRepository",
    "DelegatePostRepository",
    "Repositories",
    "get_repositories",
]
