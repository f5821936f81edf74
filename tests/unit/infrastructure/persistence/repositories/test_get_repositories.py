"""Tests for the get_repositories() DI factory."""

from unittest.mock import MagicMock

from src.infrastructure.persistence.repositories import (
    DEFAULT_LIMIT,
    DelegatePostRepository,
    DelegateUserRepository,
    Repositories,
    get_repositories,
)


def _repos(**kwargs):
    return get_repositories(MagicMock(), **kwargs)


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_users_is_correct_type():
    assert isinstance(_repos().users, DelegateUserRepository)


def test_repositories_posts_is_correct_type():
    assert isinstance(_repos().posts, DelegatePostRepository)


def test_repositories_share_adapter_factory():
    repos = _repos()
    assert repos.users.adapter_factory is repos.posts.adapter_factory


def test_repositories_use_default_limit():
    assert _repos().users.default_limit == DEFAULT_LIMIT


def test_repositories_pass_custom_default_limit():
    assert _repos(default_limit=5).posts.default_limit == 5


def test_get_repositories_does_not_resolve_delegates_eagerly():
    factory = MagicMock()
    get_repositories(factory)
    factory.create_adapter.assert_not_called()


def test_repositories_dataclass_has_two_fields():
    assert len(Repositories.__dataclass_fields__) == 2
