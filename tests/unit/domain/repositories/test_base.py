"""Tests for src/domain/repositories/base.py and delegate.py."""

import pytest

from src.domain.repositories.base import (
    Repository,
    SoftDeleteRepository,
    TransactionalRepository,
)
from src.domain.repositories.delegate import DatabaseAdapterFactory, DatabaseDelegate

_OPERATIONS = {
    "find_by_id",
    "find_one",
    "find_one_with_options",
    "find_all",
    "find_many",
    "find_many_with_options",
    "find_all_paginated",
    "count",
    "exists",
    "exists_by",
    "create",
    "create_many",
    "update",
    "update_many",
    "upsert",
    "delete",
    "delete_many",
    "refresh",
}


def test_repository_cannot_be_instantiated_directly():
    with pytest.raises(TypeError):
        Repository()  # type: ignore[abstract]


def test_repository_declares_every_operation_abstract():
    assert Repository.__abstractmethods__ == frozenset(_OPERATIONS)


def test_transactional_repository_adds_with_transaction():
    assert TransactionalRepository.__abstractmethods__ == frozenset(
        _OPERATIONS | {"with_transaction"}
    )


def test_repository_concrete_subclass_must_implement_all_methods():
    class _Partial(Repository):
        async def find_by_id(self, id): return None
        # missing the rest

    with pytest.raises(TypeError):
        _Partial()  # type: ignore[abstract]


def test_soft_delete_repository_requires_soft_delete():
    assert SoftDeleteRepository.__abstractmethods__ == frozenset({"soft_delete"})


def test_database_delegate_declares_eleven_operations():
    assert DatabaseDelegate.__abstractmethods__ == frozenset(
        {
            "find_unique",
            "find_first",
            "find_many",
            "count",
            "create",
            "create_many",
            "update",
            "update_many",
            "upsert",
            "delete",
            "delete_many",
        }
    )


def test_adapter_factory_shortcuts_use_create_adapter():
    class _Factory(DatabaseAdapterFactory):
        in_transaction = False

        def create_adapter(self, entity_name):
            return entity_name

        def transaction(self):
            raise NotImplementedError

    factory = _Factory()
    assert factory.create_user_adapter() == "User"
    assert factory.create_post_adapter() == "Post"
