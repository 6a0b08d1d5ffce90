"""Tests for storage failure handling and connection lifecycle of the SQLAlchemy adapters."""

import logging
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, insert
from sqlalchemy.exc import OperationalError

from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.shared.error import StorageFailure, StorageUnavailableError
from linkstore.infrastructure.persistence.codec import TextUuidCodec
from linkstore.infrastructure.persistence.database import create_schema
from linkstore.infrastructure.persistence.repository.code import SQLAlchemyLinkingCodeRegistry
from linkstore.infrastructure.persistence.repository.link import SQLAlchemyLinkStore
from linkstore.infrastructure.persistence.tables import build_tables


class TestStorageFailure:
    """Statement failures are logged once and raised as StorageFailure."""

    def test_missing_table_raises_storage_failure(self, store, engine, tables, caplog):
        """A failing statement should surface as StorageFailure chained to the driver error."""
        tables.metadata.drop_all(engine)
        local_id = LocalId.generate()

        with caplog.at_level(logging.ERROR), pytest.raises(StorageFailure) as exc_info:
            store.resolve_external(local_id)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert "[SQLAlchemyLinkStore]" in caplog.text
        assert str(local_id) in caplog.text

    def test_failed_write_does_not_notify(self, store, engine, tables, notifier):
        tables.metadata.drop_all(engine)

        with pytest.raises(StorageFailure):
            store.set_link(LocalId.generate(), ExternalId("42"))

        notifier.on_linked.assert_not_called()

    def test_registry_failure_is_tagged_with_registry_class(self, registry, engine, tables, caplog):
        tables.metadata.drop_all(engine)

        with caplog.at_level(logging.ERROR), pytest.raises(StorageFailure):
            registry.list_codes()

        assert "[SQLAlchemyLinkingCodeRegistry]" in caplog.text

    def test_malformed_stored_local_id_raises_storage_failure(self, engine):
        """Text that is not a UUID should fail the read instead of returning garbage."""
        tables = build_tables(TextUuidCodec())
        create_schema(engine, tables)
        with engine.begin() as conn:
            conn.execute(insert(tables.accounts).values(local_id="not-a-uuid", external_id="7"))
        store = SQLAlchemyLinkStore(engine, TextUuidCodec(), tables, MagicMock())

        with pytest.raises(StorageFailure) as exc_info:
            store.resolve_local(ExternalId("7"))

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestShutdown:
    """Tests for shutdown and the no-connection condition."""

    def test_operations_after_shutdown_raise_unavailable(self, store):
        store.shutdown()

        with pytest.raises(StorageUnavailableError):
            store.resolve_external(LocalId.generate())
        with pytest.raises(StorageUnavailableError):
            store.set_link(LocalId.generate(), ExternalId("1"))

    def test_shutdown_is_idempotent(self, store):
        store.shutdown()
        store.shutdown()

    def test_shutdown_without_engine_is_noop(self, tables, codec):
        registry = SQLAlchemyLinkingCodeRegistry(None, codec, tables)

        registry.shutdown()

        with pytest.raises(StorageUnavailableError):
            registry.lookup_code("1234")

    def test_unavailable_is_a_storage_failure(self):
        assert issubclass(StorageUnavailableError, StorageFailure)


class TestRepr:
    def test_repr_names_database(self, tmp_path, codec, notifier):
        engine = create_engine(f"sqlite:///{tmp_path / 'links.db'}")
        store = SQLAlchemyLinkStore(engine, codec, build_tables(codec), notifier)

        assert repr(store) == f"SQLAlchemyLinkStore{{database={tmp_path / 'links.db'}}}"

        store.shutdown()
        assert repr(store) == "SQLAlchemyLinkStore{database=<shut down>}"
