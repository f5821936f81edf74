"""Post domain model and its write payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .users import User


class Post(BaseModel):
    """A post, optionally attributed to a User.

    author_id is nulled (not cascaded) when the author is deleted.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    author_id: int | None = None
    create_at: datetime
    update_at: datetime
    title: str
    contents: str | None = None
    published: bool = False
    view_count: int = 0
    author: User | None = None


class PostCreate(BaseModel):
    title: str
    author_id: int | None = None
    contents: str | None = None
    published: bool = False


class PostUpdate(BaseModel):
    title: str | None = None
    contents: str | None = None
    published: bool | None = None
    view_count: int | None = None


User.model_rebuild()
