"""Database engine creation and schema bootstrap."""

import logging
import os
from pathlib import Path
from typing import Any

from sqlalchemy import Connection, Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from linkstore.config import DatabaseConfig
from linkstore.domain.shared.error import ConfigurationError
from linkstore.infrastructure.persistence.tables import LinkTables

logger = logging.getLogger(__name__)


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or "///" not in url or ":memory:" in url:
        return url

    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    # Expand ~ and make absolute
    expanded = os.path.expanduser(path)
    abs_path = os.path.abspath(expanded)

    # Ensure parent directory exists
    parent = Path(abs_path).parent
    parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def _is_sqlite_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite+pysqlite://") or ":memory:" in url


def use_immediate_transactions(engine: Engine) -> None:
    """Start every transaction on a SQLite `engine` with BEGIN IMMEDIATE.

    pysqlite only emits BEGIN before the first write, so a SELECT and the
    DELETE that depends on it would run outside one transaction. BEGIN IMMEDIATE
    takes the write lock up front; a second writer waits for the busy timeout
    and then fails with "database is locked".
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Create the database engine.

    Handles SQLite and server databases with appropriate pool settings.
    SQLite transactions take the write lock when they begin.

    Raises:
        ConfigurationError: If no database URL is configured.
    """
    if not config.url:
        raise ConfigurationError("No database URL configured", code="database_url_missing")

    url = _expand_sqlite_path(config.url)
    is_sqlite = url.startswith("sqlite")

    if is_sqlite:
        engine_kwargs: dict[str, Any] = {
            "echo": config.echo,
            "connect_args": {"check_same_thread": False},
        }
        if _is_sqlite_memory(url):
            # Single shared connection, so in-memory databases survive between calls
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs = {
            "echo": config.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    engine = create_engine(url, **engine_kwargs)
    if is_sqlite:
        use_immediate_transactions(engine)
    return engine


def create_schema(engine: Engine, tables: LinkTables) -> None:
    """Create missing link tables directly from metadata. Idempotent."""
    tables.metadata.create_all(engine, checkfirst=True)
    logger.info("Link tables ensured on %s", engine.url.render_as_string(hide_password=True))
