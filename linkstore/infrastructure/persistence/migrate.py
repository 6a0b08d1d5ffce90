"""Database migration utilities."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# Alembic environment and revisions ship inside the package
MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def get_alembic_config(native_uuids: bool | None = None) -> AlembicConfig:
    """Create Alembic config; `native_uuids` is read by the migrations to type local_id columns."""
    config = AlembicConfig()
    config.set_main_option("script_location", str(MIGRATIONS_DIR).replace("%", "%%"))
    config.attributes["native_uuids"] = native_uuids
    return config


def run_migrations(engine: Engine, native_uuids: bool | None = None) -> None:
    """Run pending Alembic migrations on `engine`.

    Migrations share the engine's connection, so in-memory SQLite databases work too.
    """
    config = get_alembic_config(native_uuids)
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
    logger.info("Database migrations complete")
