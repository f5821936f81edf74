"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .enums import DatabaseBackend, SortDirection
from .posts import Post, PostCreate, PostUpdate
from .query import BatchResult, PaginatedResult, QueryOptions, SortOptions
from .users import User, UserCreate, UserUpdate

__all__ = [
    # enums
    "DatabaseBackend",
    "SortDirection",
    # query
    "BatchResult",
    "PaginatedResult",
    "QueryOptions",
    "SortOptions",
    # users
    "User",
    "UserCreate",
    "UserUpdate",
    # posts
    "Post",
    "PostCreate",
    "PostUpdate",
]
