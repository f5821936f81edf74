"""Tests for src/domain/models/enums.py."""

from src.domain.models.enums import DatabaseBackend, SortDirection


def test_sort_direction_values():
    assert SortDirection.ASC == "asc"
    assert SortDirection.DESC == "desc"


def test_sort_direction_from_string():
    assert SortDirection("desc") is SortDirection.DESC


def test_database_backend_values():
    assert {member.value for member in DatabaseBackend} == {"sqlalchemy", "memory"}
