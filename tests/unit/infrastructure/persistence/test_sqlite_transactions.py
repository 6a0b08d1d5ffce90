"""Transaction isolation of the SQLite adapters across engines sharing one database file."""

from unittest.mock import MagicMock
from uuid import UUID

import pytest
from sqlalchemy import create_engine, select

from linkstore.config import DatabaseConfig
from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.shared.error import StorageFailure, StorageUnavailableError
from linkstore.infrastructure.persistence.codec import TextUuidCodec
from linkstore.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    use_immediate_transactions,
)
from linkstore.infrastructure.persistence.repository.code import SQLAlchemyLinkingCodeRegistry
from linkstore.infrastructure.persistence.repository.link import SQLAlchemyLinkStore
from linkstore.infrastructure.persistence.tables import build_tables

U1 = LocalId(UUID("0f8c5a8e-3d1b-4f43-9a53-5d3f0d8b8a11"))
D1 = ExternalId("111")
D2 = ExternalId("222")


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'links.db'}"


@pytest.fixture
def tables():
    return build_tables(TextUuidCodec())


@pytest.fixture
def engine_a(db_url, tables):
    engine = create_db_engine(DatabaseConfig(url=db_url))
    create_schema(engine, tables)
    yield engine
    engine.dispose()


@pytest.fixture
def engine_b(db_url, engine_a):
    """Second engine on the same file, giving up on a locked database after 100ms."""
    engine = create_engine(db_url, connect_args={"timeout": 0.1})
    use_immediate_transactions(engine)
    yield engine
    engine.dispose()


def make_store(engine, tables, notifier=None) -> SQLAlchemyLinkStore:
    return SQLAlchemyLinkStore(engine, TextUuidCodec(), tables, notifier or MagicMock())


class TestWriterIsolation:
    def test_write_waits_for_open_transaction_on_other_engine(self, engine_a, engine_b, tables):
        """A link write should not commit between another transaction's read and its write."""
        store_a = make_store(engine_a, tables)
        notifier_b = MagicMock()
        store_b = make_store(engine_b, tables, notifier_b)
        store_a.set_link(U1, D1)

        with engine_a.begin() as conn:
            current = conn.execute(select(tables.accounts.c.external_id)).scalar_one()
            with pytest.raises(StorageFailure):
                store_b.set_link(U1, D2)

        assert current == str(D1)
        assert store_a.resolve_external(U1) == D1
        notifier_b.on_linked.assert_not_called()

    def test_unlink_reports_counterpart_written_by_other_engine(self, engine_a, engine_b, tables):
        """Unlinking should report the row it deleted, not one read earlier."""
        notifier_a = MagicMock()
        store_a = make_store(engine_a, tables, notifier_a)
        store_b = make_store(engine_b, tables)

        store_a.set_link(U1, D1)
        store_b.set_link(U1, D2)
        store_a.set_link(U1, None)

        notifier_a.on_unlinked.assert_called_once_with(D2, U1)
        assert store_b.resolve_external(U1) is None

    def test_unlink_without_delete_returning(self, engine_a, tables, monkeypatch):
        """Dialects without DELETE ... RETURNING read the counterpart under a row lock."""
        monkeypatch.setattr(engine_a.dialect, "delete_returning", False)
        notifier = MagicMock()
        store = make_store(engine_a, tables, notifier)

        store.set_link(U1, D1)
        store.set_link(U1, None)

        notifier.on_unlinked.assert_called_once_with(D1, U1)
        assert store.count_links() == 0


class TestSharedEngineShutdown:
    def test_registry_keeps_working_after_store_shutdown(self, engine_a, tables):
        """Adapters on one engine share its pool; a file database survives another's shutdown."""
        store = make_store(engine_a, tables)
        registry = SQLAlchemyLinkingCodeRegistry(engine_a, TextUuidCodec(), tables)
        registry.store_code("4821", U1)

        store.shutdown()

        assert registry.lookup_code("4821") == U1
        with pytest.raises(StorageUnavailableError):
            store.resolve_external(U1)
