"""Fixtures for SQLAlchemy adapter tests against in-memory SQLite."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine

from linkstore.config import DatabaseConfig
from linkstore.infrastructure.persistence.codec import (
    LocalIdCodec,
    NativeUuidCodec,
    TextUuidCodec,
)
from linkstore.infrastructure.persistence.database import create_db_engine, create_schema
from linkstore.infrastructure.persistence.repository.code import SQLAlchemyLinkingCodeRegistry
from linkstore.infrastructure.persistence.repository.link import SQLAlchemyLinkStore
from linkstore.infrastructure.persistence.tables import LinkTables, build_tables


@pytest.fixture
def engine():
    engine = create_db_engine(DatabaseConfig(url="sqlite://"))
    yield engine
    engine.dispose()


@pytest.fixture(params=[NativeUuidCodec, TextUuidCodec], ids=["native", "text"])
def codec(request) -> LocalIdCodec:
    """Both representations; SQLite stores the native form through SQLAlchemy's Uuid type."""
    return request.param()


@pytest.fixture
def tables(engine: Engine, codec: LocalIdCodec) -> LinkTables:
    tables = build_tables(codec)
    create_schema(engine, tables)
    return tables


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def store(engine, codec, tables, notifier) -> SQLAlchemyLinkStore:
    return SQLAlchemyLinkStore(engine, codec, tables, notifier)


@pytest.fixture
def registry(engine, codec, tables) -> SQLAlchemyLinkingCodeRegistry:
    return SQLAlchemyLinkingCodeRegistry(engine, codec, tables)
