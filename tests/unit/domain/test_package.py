"""Tests for src/domain/models/__init__.py: package exports."""

from src.domain.models import __all__ as domain_all
from src.domain.models import (
    # spot-check one import from each module
    BatchResult,
    Post,
    QueryOptions,
    SortDirection,
    User,
)


def test_domain_models_exports_12_names():
    assert len(domain_all) == 12


def test_sort_direction_importable_from_package():
    assert SortDirection.ASC == "asc"


def test_query_options_importable_from_package():
    assert QueryOptions.__name__ == "QueryOptions"


def test_batch_result_importable_from_package():
    assert BatchResult(count=3).count == 3


def test_user_importable_from_package():
    assert User.__name__ == "User"


def test_post_importable_from_package():
    assert Post.__name__ == "Post"
