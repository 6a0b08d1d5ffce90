"""LinkingCodeRegistry port - pending pairing codes."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from linkstore.domain.link.model.linking_code import LinkingCode
from linkstore.domain.link.model.value import LocalId
from linkstore.domain.shared.port import Port


class LinkingCodeRegistry(Port, Protocol):
    """Maps outstanding linking codes to the local identity awaiting confirmation.

    The registry does not deduplicate codes; generating unique codes is the
    caller's job (see LinkingService.issue_code).
    """

    @abstractmethod
    def lookup_code(self, code: str) -> LocalId | None:
        """Get the local id a code was issued to, or None if unknown."""
        ...

    @abstractmethod
    def list_codes(self) -> dict[str, LocalId]:
        """Snapshot of all outstanding codes."""
        ...

    @abstractmethod
    def store_code(
        self, code: str, local_id: LocalId, *, created_at: datetime | None = None
    ) -> LinkingCode:
        """Insert a code unconditionally and return what was stored."""
        ...

    @abstractmethod
    def consume_code(self, code: str) -> LinkingCode | None:
        """Atomically read and delete one row holding `code`, the oldest if several do.

        Returns None if the code was not outstanding.
        """
        ...

    @abstractmethod
    def delete_code(self, code: str) -> bool: ...

    @abstractmethod
    def delete_codes_for(self, local_id: LocalId) -> int:
        """Delete every code issued to `local_id`. Returns the number removed."""
        ...

    @abstractmethod
    def purge_created_before(self, cutoff: datetime) -> int:
        """Delete codes created before `cutoff`. Returns the number removed."""
        ...
