"""User domain model and its write payloads.

These are pure domain objects with no ORM or persistence concerns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .posts import Post


class User(BaseModel):
    """A registered user.

    email is unique across all users (enforced by the store).
    posts is only populated when the query asks for it with
    include={"posts": True}; otherwise it stays None.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    name: str | None = None
    posts: list[Post] | None = None


class UserCreate(BaseModel):
    email: str = Field(max_length=200)
    name: str | None = Field(default=None, max_length=100)


class UserUpdate(BaseModel):
    """Partial update: only explicitly set fields are written."""

    email: str | None = Field(default=None, max_length=200)
    name: str | None = Field(default=None, max_length=100)
