"""User service.

The only layer that turns store failures into domain-facing errors: a
ConstraintViolationError on create becomes DuplicateEmailError, and lookups
that come back empty become UserNotFoundError.
"""

from __future__ import annotations

import logging

from src.domain.exceptions import (
    ConstraintViolationError,
    DuplicateEmailError,
    UserNotFoundError,
)
from src.domain.models.query import PaginatedResult, QueryOptions
from src.domain.models.users import User, UserCreate
from src.domain.repositories.users import UserRepository

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 10


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def create_user(self, payload: UserCreate) -> User:
        try:
            user = await self._users.create(payload)
        except ConstraintViolationError as exc:
            logger.info("Rejected duplicate email %s", payload.email)
            raise DuplicateEmailError(payload.email) from exc
        logger.info("Created user %s", user.id)
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self._users.find_by_email(email)
        if user is None:
            raise UserNotFoundError(email=email)
        return user

    async def get_user_by_id(self, user_id: int) -> User:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(id=user_id)
        return user

    async def get_paginated_users(self, page: int = 1) -> PaginatedResult[User]:
        return await self._users.find_all_paginated(
            QueryOptions(page=page, limit=USERS_PAGE_SIZE)
        )
