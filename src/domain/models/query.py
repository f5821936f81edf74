"""Query options and pagination value objects.

These shapes are store-agnostic: every adapter receives the same where /
include / select / order_by / skip / take vocabulary and translates it into
its own query language.
"""

from __future__ import annotations

import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .enums import SortDirection

T = TypeVar("T")


class SortOptions(BaseModel):
    """One ordering key.  In a list, earlier entries take precedence."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: SortDirection = SortDirection.ASC


class QueryOptions(BaseModel):
    """Description of a read query.

    Every field is optional; an empty QueryOptions means "everything, page 1".
    page/limit drive find_all_paginated; skip/take are raw window controls
    and override the values derived from page/limit when given.
    """

    model_config = ConfigDict(frozen=True)

    where: dict[str, Any] | None = None
    include: dict[str, Any] | None = None
    select: dict[str, bool] | None = None
    order_by: list[SortOptions] | None = None
    page: int | None = Field(default=None, gt=0)
    limit: int | None = Field(default=None, gt=0)
    skip: int | None = Field(default=None, ge=0)
    take: int | None = Field(default=None, ge=0)


class BatchResult(BaseModel):
    """Outcome of a bulk write: how many records were affected."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0)


class PaginatedResult(BaseModel, Generic[T]):
    """One page of data plus total-count metadata.

    total is the full match count independent of the page window, so
    len(data) <= limit while total may be much larger.
    """

    data: list[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, data: list[T], total: int, page: int, limit: int) -> PaginatedResult[T]:
        total_pages = math.ceil(total / limit)
        return cls(
            data=data,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )
