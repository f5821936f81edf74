"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod

from src.domain.models.users import User, UserCreate, UserUpdate

from .base import TransactionalRepository


class UserRepository(TransactionalRepository[User, UserCreate, UserUpdate]):
    """Read/write interface for User entities.

    find_by_email returns None when no user has that email.  create raises
    ConstraintViolationError when the email is already taken.
    """

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Return the user with the given email, or None."""
