"""Shared plumbing for SQLAlchemy-backed link adapters."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from linkstore.domain.shared.error import StorageFailure, StorageUnavailableError
from linkstore.infrastructure.persistence.codec import LocalIdCodec
from linkstore.infrastructure.persistence.tables import LinkTables

logger = logging.getLogger(__name__)


class SQLAlchemyAdapter:
    """Holds the engine, codec and tables; owns connection checkout and error translation.

    Every statement runs on a connection checked out for that call only. The
    pool itself lives until shutdown().

    The store and the code registry are normally built on the same Engine (see
    PersistenceProvider), and shutdown() on either disposes that shared pool.
    Another adapter on the engine keeps working on a file or server database
    because the engine opens a fresh pool on its next checkout. An in-memory
    SQLite database lives in the pool's only connection and is lost. In a
    dishka container the container owns disposal; call shutdown() only on
    adapters built by hand.
    """

    def __init__(self, engine: Engine | None, codec: LocalIdCodec, tables: LinkTables) -> None:
        self._engine = engine
        self._codec = codec
        self._tables = tables

    @property
    def codec(self) -> LocalIdCodec:
        return self._codec

    def shutdown(self) -> None:
        """Dispose the engine's connection pool, shared with any adapter on the same engine.

        This adapter raises StorageUnavailableError afterwards. No-op if already shut down.
        """
        engine, self._engine = self._engine, None
        if engine is None:
            return
        engine.dispose()
        logger.info("[%s] Connection pool released", type(self).__name__)

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Log and translate driver failures raised while performing `action`.

        Malformed stored values (ValueError while decoding) count as storage failures.
        """
        try:
            yield
        except (SQLAlchemyError, ValueError) as e:
            logger.error("[%s] %s failed: %s", type(self).__name__, action, e)
            raise StorageFailure(f"{action} failed: {e}") from e

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """Connection for read-only statements."""
        with self._require_engine().connect() as conn:
            yield conn

    @contextmanager
    def _begin(self) -> Iterator[Connection]:
        """Connection inside a transaction, committed on success and rolled back on error."""
        with self._require_engine().begin() as conn:
            yield conn

    def _require_engine(self) -> Engine:
        if self._engine is None:
            logger.error("[%s] No database connection available", type(self).__name__)
            raise StorageUnavailableError(
                f"{type(self).__name__} has no database connection", code="storage_unavailable"
            )
        return self._engine

    def __repr__(self) -> str:
        if self._engine is None:
            return f"{type(self).__name__}{{database=<shut down>}}"
        return f"{type(self).__name__}{{database={self._engine.url.database}}}"
