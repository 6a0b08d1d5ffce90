"""SQLAlchemy implementation of the LinkingCodeRegistry port."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, insert, select

from linkstore.domain.link.model.linking_code import LinkingCode
from linkstore.domain.link.model.value import LocalId
from linkstore.domain.link.port.code_registry import LinkingCodeRegistry
from linkstore.infrastructure.persistence.repository.base import SQLAlchemyAdapter

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Timestamps are stored in UTC. SQLite drops tzinfo, so naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SQLAlchemyLinkingCodeRegistry(SQLAlchemyAdapter, LinkingCodeRegistry):
    """LinkingCodeRegistry over the `codes` table."""

    def _row_to_code(self, row: Any) -> LinkingCode:
        return LinkingCode(
            code=row.code,
            local_id=self._codec.decode(row.local_id),
            created_at=_as_utc(row.created_at),
        )

    def lookup_code(self, code: str) -> LocalId | None:
        codes = self._tables.codes
        stmt = (
            select(codes.c.local_id)
            .where(codes.c.code == code)
            .order_by(codes.c.created_at, codes.c.id)
            .limit(1)
        )
        with self._storage_errors(f"Looking up linking code {code}"):
            with self._connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
            return self._codec.decode(value) if value is not None else None

    def list_codes(self) -> dict[str, LocalId]:
        codes = self._tables.codes
        stmt = select(codes.c.code, codes.c.local_id).order_by(codes.c.created_at, codes.c.id)
        with self._storage_errors("Listing linking codes"):
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
            listed: dict[str, LocalId] = {}
            for row in rows:
                # Same row lookup_code and consume_code pick for a duplicated code
                listed.setdefault(row.code, self._codec.decode(row.local_id))
            return listed

    def store_code(
        self, code: str, local_id: LocalId, *, created_at: datetime | None = None
    ) -> LinkingCode:
        created_at = _as_utc(created_at) if created_at else datetime.now(UTC)
        linking_code = LinkingCode(code=code, local_id=local_id, created_at=created_at)
        stmt = insert(self._tables.codes).values(
            code=linking_code.code,
            local_id=self._codec.encode(local_id),
            created_at=linking_code.created_at,
        )
        with self._storage_errors(f"Storing linking code for local id {local_id}"):
            with self._begin() as conn:
                conn.execute(stmt)
        logger.debug("Stored linking code for local_id=%s", local_id)
        return linking_code

    def consume_code(self, code: str) -> LinkingCode | None:
        """Take the oldest row holding `code`; other rows with the same code stay outstanding."""
        codes = self._tables.codes
        stmt = (
            select(codes.c.id, codes.c.code, codes.c.local_id, codes.c.created_at)
            .where(codes.c.code == code)
            .order_by(codes.c.created_at, codes.c.id)
            .limit(1)
            .with_for_update()
        )
        with self._storage_errors(f"Consuming linking code {code}"):
            with self._begin() as conn:
                row = conn.execute(stmt).first()
                if row is None:
                    return None
                conn.execute(delete(codes).where(codes.c.id == row.id))
            return self._row_to_code(row)

    def delete_code(self, code: str) -> bool:
        codes = self._tables.codes
        with self._storage_errors(f"Deleting linking code {code}"):
            with self._begin() as conn:
                deleted = conn.execute(delete(codes).where(codes.c.code == code)).rowcount
        return deleted > 0

    def delete_codes_for(self, local_id: LocalId) -> int:
        codes = self._tables.codes
        stmt = delete(codes).where(codes.c.local_id == self._codec.encode(local_id))
        with self._storage_errors(f"Deleting linking codes for local id {local_id}"):
            with self._begin() as conn:
                deleted = conn.execute(stmt).rowcount
        return deleted

    def purge_created_before(self, cutoff: datetime) -> int:
        codes = self._tables.codes
        stmt = delete(codes).where(codes.c.created_at < _as_utc(cutoff))
        with self._storage_errors(f"Purging linking codes created before {cutoff.isoformat()}"):
            with self._begin() as conn:
                purged = conn.execute(stmt).rowcount
        return purged
