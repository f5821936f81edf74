"""Tests for src/domain/exceptions.py."""

from src.domain.exceptions import (
    ConstraintViolationError,
    DuplicateEmailError,
    InvalidQueryError,
    NotFoundError,
    RepositoryError,
    UnknownEntityError,
    UnsupportedBackendError,
    UserNotFoundError,
)


def test_not_found_is_repository_error():
    err = NotFoundError("User", {"id": 9}, "update")
    assert isinstance(err, RepositoryError)
    assert err.entity_name == "User"
    assert err.operation == "update"
    assert err.where == {"id": 9}


def test_constraint_violation_lists_fields_in_message():
    err = ConstraintViolationError("User", "create", fields=["email"], detail="duplicate")
    assert err.fields == ("email",)
    assert "email" in str(err)
    assert "duplicate" in str(err)


def test_unknown_entity_lists_available_models_sorted():
    err = UnknownEntityError("Comment", ["user", "post"])
    assert str(err) == "Database model 'Comment' is not bound. Available models: post, user"


def test_unknown_entity_with_no_bindings():
    assert "(none)" in str(UnknownEntityError("User", []))


def test_unsupported_backend_names_requested_and_supported():
    err = UnsupportedBackendError("mongodb", ["sqlalchemy", "memory"])
    assert "mongodb" in str(err)
    assert err.supported == ("memory", "sqlalchemy")


def test_invalid_query_is_value_error():
    assert isinstance(InvalidQueryError("bad"), ValueError)


def test_duplicate_email_message():
    assert "a@x.com" in str(DuplicateEmailError("a@x.com"))


def test_user_not_found_message_names_lookup():
    assert str(UserNotFoundError(email="a@x.com")) == "User not found (email: a@x.com)"
