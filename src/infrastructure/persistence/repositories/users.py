"""Delegate-backed implementation of UserRepository."""

from __future__ import annotations

from src.domain.models.users import User, UserCreate, UserUpdate
from src.domain.repositories.users import UserRepository

from .base import TransactionalBaseRepository


class DelegateUserRepository(
    TransactionalBaseRepository[User, UserCreate, UserUpdate], UserRepository
):
    entity_name = "User"

    async def find_by_email(self, email: str) -> User | None:
        return await self.find_one({"email": email})
