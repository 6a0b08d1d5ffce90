from typing import Protocol

from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.shared.port import Port


class LinkEventNotifier(Port, Protocol):
    """Receives link transitions from the store. Delivery is the implementer's concern."""

    def on_linked(self, external_id: ExternalId, local_id: LocalId) -> None:
        """Called after a link was created or re-pointed."""
        ...

    def on_unlinked(self, external_id: ExternalId, local_id: LocalId) -> None:
        """Called after a link was removed, with the pair that existed just before removal."""
        ...
