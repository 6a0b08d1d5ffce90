"""SQLAlchemy table definitions - the local_id column type comes from the codec."""

from dataclasses import dataclass

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    UniqueConstraint,
)

from linkstore.domain.link.model.value import EXTERNAL_ID_MAX_LENGTH
from linkstore.infrastructure.persistence.codec import LocalIdCodec

ACCOUNTS_TABLE = "accounts"
CODES_TABLE = "codes"


@dataclass(frozen=True)
class LinkTables:
    """Tables bound to one codec, sharing a MetaData."""

    metadata: MetaData
    accounts: Table
    codes: Table


def build_tables(codec: LocalIdCodec) -> LinkTables:
    """Build the accounts and codes tables for `codec`."""
    metadata = MetaData()

    # ============================================================================
    # ACCOUNTS TABLE (one row per link; unique on both sides)
    # ============================================================================
    accounts = Table(
        ACCOUNTS_TABLE,
        metadata,
        Column("local_id", codec.column_type(), nullable=False),
        Column("external_id", String(EXTERNAL_ID_MAX_LENGTH), nullable=False),
        PrimaryKeyConstraint("local_id", name="pk_accounts"),
        UniqueConstraint("external_id", name="uq_accounts_external_id"),
    )

    # ============================================================================
    # CODES TABLE (pending linking codes; code uniqueness is the issuer's job,
    # so rows are addressed by a surrogate id)
    # ============================================================================
    codes = Table(
        CODES_TABLE,
        metadata,
        Column("id", Integer, autoincrement=True, nullable=False),
        Column("code", String(32), nullable=False),
        Column("local_id", codec.column_type(), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        PrimaryKeyConstraint("id", name="pk_codes"),
    )

    Index("idx_codes_code", codes.c.code)
    Index("idx_codes_local_id", codes.c.local_id)

    return LinkTables(metadata=metadata, accounts=accounts, codes=codes)
