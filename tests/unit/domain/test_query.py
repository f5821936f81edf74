"""Tests for src/domain/models/query.py."""

import pytest
from pydantic import ValidationError

from src.domain.models.enums import SortDirection
from src.domain.models.query import BatchResult, PaginatedResult, QueryOptions, SortOptions


# --- SortOptions ---

def test_sort_options_defaults_to_ascending():
    assert SortOptions(field="email").direction == SortDirection.ASC


def test_sort_options_accepts_plain_string_direction():
    assert SortOptions(field="email", direction="desc").direction == SortDirection.DESC


# --- QueryOptions ---

def test_query_options_empty_by_default():
    options = QueryOptions()
    assert options.where is None
    assert options.page is None
    assert options.skip is None


def test_query_options_rejects_zero_page():
    with pytest.raises(ValidationError):
        QueryOptions(page=0)


def test_query_options_rejects_negative_limit():
    with pytest.raises(ValidationError):
        QueryOptions(limit=-5)


def test_query_options_accepts_zero_skip_and_take():
    options = QueryOptions(skip=0, take=0)
    assert options.skip == 0
    assert options.take == 0


def test_query_options_rejects_negative_skip():
    with pytest.raises(ValidationError):
        QueryOptions(skip=-1)


def test_query_options_is_frozen():
    with pytest.raises(ValidationError):
        QueryOptions().page = 2  # type: ignore[misc]


def test_query_options_parses_order_by_dicts():
    options = QueryOptions(order_by=[{"field": "id", "direction": "desc"}])
    assert options.order_by == [SortOptions(field="id", direction=SortDirection.DESC)]


# --- BatchResult ---

def test_batch_result_rejects_negative_count():
    with pytest.raises(ValidationError):
        BatchResult(count=-1)


# --- PaginatedResult.build ---

def test_build_rounds_total_pages_up():
    result = PaginatedResult.build(data=[], total=25, page=1, limit=10)
    assert result.total_pages == 3


def test_build_first_page_has_next_but_no_previous():
    result = PaginatedResult.build(data=[], total=25, page=1, limit=10)
    assert result.has_next is True
    assert result.has_previous is False


def test_build_last_page_has_previous_but_no_next():
    result = PaginatedResult.build(data=[], total=25, page=3, limit=10)
    assert result.has_next is False
    assert result.has_previous is True


def test_build_empty_result_has_zero_pages():
    result = PaginatedResult.build(data=[], total=0, page=1, limit=10)
    assert result.total_pages == 0
    assert result.has_next is False
    assert result.has_previous is False


def test_build_page_beyond_range_has_previous():
    result = PaginatedResult.build(data=[], total=5, page=4, limit=10)
    assert result.has_next is False
    assert result.has_previous is True


def test_build_keeps_data():
    result = PaginatedResult.build(data=[1, 2], total=2, page=1, limit=10)
    assert result.data == [1, 2]
