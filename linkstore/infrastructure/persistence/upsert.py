"""Single-statement insert-or-update per dialect."""

from typing import Any

from sqlalchemy import Column, Connection, Table, insert, update
from sqlalchemy.dialects import mysql, postgresql, sqlite


def upsert(conn: Connection, table: Table, key: Column[Any], values: dict[str, Any]) -> None:
    """Insert `values` into `table`, or update the row already holding the same `key`.

    `key` must carry a primary key or unique constraint. PostgreSQL and SQLite use
    ON CONFLICT, MySQL/MariaDB use ON DUPLICATE KEY; other dialects fall back to
    update-then-insert, which is only atomic inside the caller's transaction.
    """
    changes = {name: value for name, value in values.items() if name != key.name}
    dialect = conn.dialect.name

    if dialect == "postgresql":
        pg_stmt = postgresql.insert(table).values(**values)
        conn.execute(pg_stmt.on_conflict_do_update(index_elements=[key], set_=changes))
    elif dialect == "sqlite":
        sqlite_stmt = sqlite.insert(table).values(**values)
        conn.execute(sqlite_stmt.on_conflict_do_update(index_elements=[key], set_=changes))
    elif dialect in ("mysql", "mariadb"):
        mysql_stmt = mysql.insert(table).values(**values)
        conn.execute(mysql_stmt.on_duplicate_key_update(**changes))
    else:
        result = conn.execute(update(table).where(key == values[key.name]).values(**changes))
        if result.rowcount == 0:
            conn.execute(insert(table).values(**values))
