"""create_link_tables

Create the accounts and codes tables. local_id columns use a native UUID type
where the backend supports one, otherwise the 36-character text form.

Revision ID: create_link_tables
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import context, op

# revision identifiers, used by Alembic.
revision: str = "create_link_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _local_id_type() -> sa.types.TypeEngine:
    native = context.config.attributes.get("native_uuids")
    if native is None:
        native = op.get_context().dialect.supports_native_uuid
    return sa.Uuid(as_uuid=True, native_uuid=True) if native else sa.String(36)


def upgrade() -> None:
    """Add link tables."""
    # ACCOUNTS TABLE
    op.create_table(
        "accounts",
        sa.Column("local_id", _local_id_type(), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("local_id", name="pk_accounts"),
        sa.UniqueConstraint("external_id", name="uq_accounts_external_id"),
    )

    # CODES TABLE
    op.create_table(
        "codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("local_id", _local_id_type(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_codes"),
    )
    op.create_index("idx_codes_code", "codes", ["code"])
    op.create_index("idx_codes_local_id", "codes", ["local_id"])


def downgrade() -> None:
    """Remove link tables."""
    op.drop_index("idx_codes_local_id", table_name="codes")
    op.drop_index("idx_codes_code", table_name="codes")
    op.drop_table("codes")
    op.drop_table("accounts")
