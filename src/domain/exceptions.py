"""Error taxonomy for the data-access layer.

Adapters translate driver-specific failures into these types (chaining the
original exception as __cause__).  Repositories and adapter factories never
catch or wrap them; only the service layer maps them to domain errors.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class RepositoryError(Exception):
    """Base class for every failure raised by the data-access layer."""

    def __init__(
        self,
        message: str,
        entity_name: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.entity_name = entity_name
        self.operation = operation
        super().__init__(message)


class NotFoundError(RepositoryError):
    """A record required by update/delete does not exist."""

    def __init__(self, entity_name: str, where: dict[str, Any], operation: str) -> None:
        super().__init__(
            f"{entity_name} matching {where!r} not found",
            entity_name=entity_name,
            operation=operation,
        )
        self.where = where


class ConstraintViolationError(RepositoryError):
    """A uniqueness or referential constraint was violated on write."""

    def __init__(
        self,
        entity_name: str,
        operation: str,
        fields: Iterable[str] = (),
        detail: str | None = None,
    ) -> None:
        self.fields = tuple(fields)
        message = f"Constraint violated on {entity_name}.{operation}"
        if self.fields:
            message += f" (fields: {', '.join(self.fields)})"
        if detail:
            message += f": {detail}"
        super().__init__(message, entity_name=entity_name, operation=operation)


class UnknownEntityError(RepositoryError):
    """The adapter factory has no binding for the requested entity name."""

    def __init__(self, entity_name: str, known: Iterable[str]) -> None:
        self.known = tuple(sorted(known))
        super().__init__(
            f"Database model '{entity_name}' is not bound. "
            f"Available models: {', '.join(self.known) or '(none)'}",
            entity_name=entity_name,
            operation="create_adapter",
        )


class UnsupportedBackendError(RepositoryError):
    """The configured store technology has no adapter implementation."""

    def __init__(self, requested: str, supported: Iterable[str]) -> None:
        self.requested = requested
        self.supported = tuple(sorted(supported))
        super().__init__(
            f"Unsupported database backend '{requested}'. "
            f"Supported backends: {', '.join(self.supported)}",
            operation="create_adapter_factory",
        )


class InvalidQueryError(RepositoryError, ValueError):
    """The caller supplied arguments the store cannot execute."""


class UserServiceError(Exception):
    """Base class for domain-facing user errors."""


class DuplicateEmailError(UserServiceError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A user with email '{email}' already exists")


class UserNotFoundError(UserServiceError):
    def __init__(self, **lookup: object) -> None:
        self.lookup = lookup
        detail = ", ".join(f"{key}: {value}" for key, value in lookup.items())
        super().__init__(f"User not found ({detail})")
