"""Unit tests for src/infrastructure/database.py.

Tests cover Settings defaults, env var override, and object types.
No database connection is required.
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from src.infrastructure.database import (
    Base,
    Settings,
    build_engine,
    build_session_factory,
    get_settings,
)


def test_settings_default_url_uses_asyncpg():
    assert "postgresql+asyncpg" in Settings().database_url


def test_settings_default_url_targets_localhost():
    assert "localhost" in Settings().database_url


def test_settings_default_backend_is_sqlalchemy():
    assert Settings().database_backend == "sqlalchemy"


def test_settings_default_page_size():
    assert Settings().default_page_size == 20


def test_settings_reads_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@myhost/mydb")
    assert Settings().database_url == "postgresql+asyncpg://u:p@myhost/mydb"


def test_settings_reads_backend_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_BACKEND", "memory")
    assert Settings().database_backend == "memory"


def test_settings_rejects_non_positive_page_size(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_build_engine_is_async():
    engine = build_engine(Settings(database_url="sqlite+aiosqlite:///:memory:"))
    assert isinstance(engine, AsyncEngine)


def test_session_factory_produces_async_sessions():
    engine = build_engine(Settings(database_url="sqlite+aiosqlite:///:memory:"))
    factory = build_session_factory(engine)
    assert isinstance(factory, async_sessionmaker)
    assert factory.class_ is AsyncSession
