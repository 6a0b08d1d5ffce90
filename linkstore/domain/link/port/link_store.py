"""LinkStore port - the durable local <-> external identity mapping."""

from abc import abstractmethod
from collections.abc import Iterable
from typing import Protocol

from linkstore.domain.link.model.account_link import AccountLink
from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.shared.port import Port


class LinkStore(Port, Protocol):
    """Resolves and mutates the 1:1 mapping between local and external identities.

    Callers may enter from either identity space, so every mutation has a
    local-keyed and an external-keyed form. Both maintain the same relation.
    All operations raise StorageFailure when the backing statement fails.
    """

    @abstractmethod
    def resolve_external(self, local_id: LocalId) -> ExternalId | None:
        """Get the external id linked to `local_id`, or None if unlinked."""
        ...

    @abstractmethod
    def resolve_local(self, external_id: ExternalId) -> LocalId | None:
        """Get the local id linked to `external_id`, or None if unlinked."""
        ...

    @abstractmethod
    def set_link(self, local_id: LocalId, external_id: ExternalId | None) -> None:
        """Link `local_id` to `external_id`, or unlink it when `external_id` is None.

        Linking replaces any previous counterpart of either identity.
        Fires on_linked after a link, on_unlinked after removing an existing link.
        """
        ...

    @abstractmethod
    def set_link_by_external(self, external_id: ExternalId, local_id: LocalId | None) -> None:
        """Mirror of set_link keyed by the external identity."""
        ...

    @abstractmethod
    def is_linked_local(self, local_id: LocalId) -> bool: ...

    @abstractmethod
    def is_linked_external(self, external_id: ExternalId) -> bool: ...

    @abstractmethod
    def resolve_many_external(self, local_ids: Iterable[LocalId]) -> dict[LocalId, ExternalId]:
        """Bulk resolve; unlinked ids are absent from the result."""
        ...

    @abstractmethod
    def resolve_many_local(self, external_ids: Iterable[ExternalId]) -> dict[ExternalId, LocalId]:
        """Bulk resolve; unlinked ids are absent from the result."""
        ...

    @abstractmethod
    def count_links(self) -> int: ...

    @abstractmethod
    def linked_accounts(self) -> list[AccountLink]:
        """Snapshot of every current link."""
        ...

    @abstractmethod
    def shutdown(self) -> None:
        """Release the underlying connection pool. Safe to call more than once.

        The pool may be shared with other adapters built on the same engine.
        """
        ...
