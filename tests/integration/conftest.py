"""Fixtures for tests against a real PostgreSQL server.

Set LINKSTORE_DATABASE__URL to a postgresql URL to run them; they are skipped otherwise.
"""

import os

import pytest
from sqlalchemy import text

from linkstore.config import DatabaseConfig
from linkstore.infrastructure.persistence.database import create_db_engine


@pytest.fixture
def pg_engine():
    url = os.environ.get("LINKSTORE_DATABASE__URL", "")
    if "postgresql" not in url:
        pytest.skip("LINKSTORE_DATABASE__URL does not point at PostgreSQL")
    engine = create_db_engine(DatabaseConfig(url=url))
    yield engine
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE IF EXISTS accounts, codes, alembic_version"))
    engine.dispose()
