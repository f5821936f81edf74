"""Domain enumerations.

String-valued enums use the str mixin so they serialize cleanly to JSON and
remain comparable to plain strings ("asc" == SortDirection.ASC).
"""

from enum import Enum


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DatabaseBackend(str, Enum):
    """Store technologies with an adapter implementation."""

    SQLALCHEMY = "sqlalchemy"
    MEMORY = "memory"
