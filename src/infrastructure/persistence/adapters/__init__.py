"""Concrete DatabaseDelegate implementations and their adapter factories."""

from .factory import (
    MemoryAdapterFactory,
    SqlAlchemyAdapterFactory,
    create_adapter_factory,
    default_bindings,
    default_memory_tables,
)
from .memory import InMemoryStore, MemoryDelegate, MemoryTable, Relation
from .sql import ModelBinding, SqlAlchemyDelegate

__all__ = [
    "InMemoryStore",
    "MemoryAdapterFactory",
    "MemoryDelegate",
    "MemoryTable",
    "ModelBinding",
    "Relation",
    "SqlAlchemyAdapterFactory",
    "SqlAlchemyDelegate",
    "create_adapter_factory",
    "default_bindings",
    "default_memory_tables",
]
