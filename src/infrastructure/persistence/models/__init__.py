"""ORM model registry. Imports every mapper class so it is registered with
Base.metadata before Alembic or SQLAlchemy runs.
"""

from src.infrastructure.persistence.models.users import Post, User

__all__ = [
    "User",
    "Post",
]
