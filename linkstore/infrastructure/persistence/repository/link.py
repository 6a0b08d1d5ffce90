"""SQLAlchemy implementation of the LinkStore port."""

import logging
from collections.abc import Iterable
from typing import Any, NamedTuple

from sqlalchemy import Column, ColumnElement, Connection, Engine, delete, func, select

from linkstore.domain.link.model.account_link import AccountLink
from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.link.port.link_store import LinkStore
from linkstore.domain.link.port.notifier import LinkEventNotifier
from linkstore.infrastructure.persistence.codec import LocalIdCodec
from linkstore.infrastructure.persistence.repository.base import SQLAlchemyAdapter
from linkstore.infrastructure.persistence.tables import LinkTables
from linkstore.infrastructure.persistence.upsert import upsert

logger = logging.getLogger(__name__)


class _LinkChange(NamedTuple):
    """Outcome of a link write, in stored (encoded) form."""

    changed: bool
    # Row on the other side that held the new counterpart and was removed
    displaced: Any | None


class SQLAlchemyLinkStore(SQLAlchemyAdapter, LinkStore):
    """LinkStore over the `accounts` table.

    Writes are transactional: a link is one upsert keyed by the identity being
    set, preceded by removal of any row that bound the new counterpart to
    someone else; an unlink deletes the row and returns its counterpart in one
    statement. Rows read before a write are locked (FOR UPDATE, or the SQLite
    write lock taken by engines from create_db_engine). The primary key on
    local_id and the unique constraint on external_id make a losing concurrent
    writer fail with StorageFailure instead of leaving a duplicate behind.

    Notifier hooks run after commit and only when state actually changed.
    """

    def __init__(
        self,
        engine: Engine | None,
        codec: LocalIdCodec,
        tables: LinkTables,
        notifier: LinkEventNotifier,
    ) -> None:
        super().__init__(engine, codec, tables)
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve_external(self, local_id: LocalId) -> ExternalId | None:
        accounts = self._tables.accounts
        stmt = select(accounts.c.external_id).where(
            accounts.c.local_id == self._codec.encode(local_id)
        )
        with self._storage_errors(f"Converting local id {local_id} to external id"):
            with self._connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
            external_id = ExternalId(value) if value is not None else None
        logger.debug("Resolved local_id=%s -> external_id=%s", local_id, external_id)
        return external_id

    def resolve_local(self, external_id: ExternalId) -> LocalId | None:
        accounts = self._tables.accounts
        stmt = select(accounts.c.local_id).where(accounts.c.external_id == str(external_id))
        with self._storage_errors(f"Converting external id {external_id} to local id"):
            with self._connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
            local_id = self._codec.decode(value) if value is not None else None
        logger.debug("Resolved external_id=%s -> local_id=%s", external_id, local_id)
        return local_id

    def is_linked_local(self, local_id: LocalId) -> bool:
        return self.resolve_external(local_id) is not None

    def is_linked_external(self, external_id: ExternalId) -> bool:
        return self.resolve_local(external_id) is not None

    def resolve_many_external(self, local_ids: Iterable[LocalId]) -> dict[LocalId, ExternalId]:
        encoded = [self._codec.encode(local_id) for local_id in set(local_ids)]
        if not encoded:
            return {}
        accounts = self._tables.accounts
        stmt = select(accounts.c.local_id, accounts.c.external_id).where(
            accounts.c.local_id.in_(encoded)
        )
        with self._storage_errors(f"Converting {len(encoded)} local ids to external ids"):
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
            return {self._codec.decode(row.local_id): ExternalId(row.external_id) for row in rows}

    def resolve_many_local(self, external_ids: Iterable[ExternalId]) -> dict[ExternalId, LocalId]:
        raw = [str(external_id) for external_id in set(external_ids)]
        if not raw:
            return {}
        accounts = self._tables.accounts
        stmt = select(accounts.c.local_id, accounts.c.external_id).where(
            accounts.c.external_id.in_(raw)
        )
        with self._storage_errors(f"Converting {len(raw)} external ids to local ids"):
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
            return {ExternalId(row.external_id): self._codec.decode(row.local_id) for row in rows}

    def count_links(self) -> int:
        stmt = select(func.count()).select_from(self._tables.accounts)
        with self._storage_errors("Counting links"), self._connect() as conn:
            return conn.execute(stmt).scalar_one()

    def linked_accounts(self) -> list[AccountLink]:
        accounts = self._tables.accounts
        stmt = select(accounts.c.local_id, accounts.c.external_id)
        with self._storage_errors("Listing linked accounts"):
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
            return [
                AccountLink(
                    local_id=self._codec.decode(row.local_id),
                    external_id=ExternalId(row.external_id),
                )
                for row in rows
            ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_link(self, local_id: LocalId, external_id: ExternalId | None) -> None:
        accounts = self._tables.accounts
        encoded = self._codec.encode(local_id)

        if external_id is None:
            with self._storage_errors(f"Unlinking local id {local_id}"):
                previous = self._unlink(accounts.c.local_id, encoded, accounts.c.external_id)
                previous_external = ExternalId(previous) if previous is not None else None
            if previous_external is not None:
                logger.info("Unlinked local_id=%s from external_id=%s", local_id, previous_external)
                self._notifier.on_unlinked(previous_external, local_id)
            return

        with self._storage_errors(f"Linking local id {local_id} to external id {external_id}"):
            change = self._link(
                accounts.c.local_id, encoded, accounts.c.external_id, str(external_id)
            )
            displaced = (
                self._codec.decode(change.displaced) if change.displaced is not None else None
            )
        if not change.changed:
            logger.debug("local_id=%s already linked to external_id=%s", local_id, external_id)
            return
        if displaced is not None:
            logger.info("Unlinked local_id=%s from external_id=%s", displaced, external_id)
            self._notifier.on_unlinked(external_id, displaced)
        logger.info("Linked local_id=%s to external_id=%s", local_id, external_id)
        self._notifier.on_linked(external_id, local_id)

    def set_link_by_external(self, external_id: ExternalId, local_id: LocalId | None) -> None:
        accounts = self._tables.accounts
        raw = str(external_id)

        if local_id is None:
            with self._storage_errors(f"Unlinking external id {external_id}"):
                previous = self._unlink(accounts.c.external_id, raw, accounts.c.local_id)
                previous_local = self._codec.decode(previous) if previous is not None else None
            if previous_local is not None:
                logger.info("Unlinked local_id=%s from external_id=%s", previous_local, external_id)
                self._notifier.on_unlinked(external_id, previous_local)
            return

        with self._storage_errors(f"Linking external id {external_id} to local id {local_id}"):
            change = self._link(
                accounts.c.external_id, raw, accounts.c.local_id, self._codec.encode(local_id)
            )
            displaced = ExternalId(change.displaced) if change.displaced is not None else None
        if not change.changed:
            logger.debug("external_id=%s already linked to local_id=%s", external_id, local_id)
            return
        if displaced is not None:
            logger.info("Unlinked local_id=%s from external_id=%s", local_id, displaced)
            self._notifier.on_unlinked(displaced, local_id)
        logger.info("Linked local_id=%s to external_id=%s", local_id, external_id)
        self._notifier.on_linked(external_id, local_id)

    def _link(
        self, key: Column[Any], key_value: Any, other: Column[Any], other_value: Any
    ) -> _LinkChange:
        """Make (key_value, other_value) the only row holding either value.

        Works for both directions: `key` is the column of the identity being set.
        """
        accounts = self._tables.accounts
        with self._begin() as conn:
            current = self._select_for_update(conn, other, key == key_value)
            if current is not None and current == other_value:
                return _LinkChange(changed=False, displaced=None)

            displaced = self._select_for_update(conn, key, other == other_value)
            if displaced is not None:
                conn.execute(delete(accounts).where(other == other_value))

            upsert(conn, accounts, key, {key.name: key_value, other.name: other_value})
        return _LinkChange(changed=True, displaced=displaced)

    def _unlink(self, key: Column[Any], key_value: Any, other: Column[Any]) -> Any | None:
        """Delete the row keyed by `key_value`, returning its counterpart as stored.

        The counterpart reported is the one the DELETE removed: read through
        RETURNING where the dialect has it, else under the row lock.
        """
        stmt = delete(self._tables.accounts).where(key == key_value)
        with self._begin() as conn:
            if conn.dialect.delete_returning:
                return conn.execute(stmt.returning(other)).scalar_one_or_none()
            previous = self._select_for_update(conn, other, key == key_value)
            conn.execute(stmt)
        return previous

    def _select_for_update(
        self, conn: Connection, column: Column[Any], criterion: ColumnElement[bool]
    ) -> Any | None:
        stmt = select(column).where(criterion).with_for_update()
        return conn.execute(stmt).scalar_one_or_none()
