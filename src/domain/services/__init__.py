"""Domain services package."""

from .users import UserService

__all__ = ["UserService"]
