"""Domain events for the link domain."""

from linkstore.domain.shared.event import Event


class AccountLinked(Event):
    """Emitted after a local identity has been linked (or re-linked) to an external identity."""

    external_id: str
    local_id: str


class AccountUnlinked(Event):
    """Emitted after a link was removed; carries the pair as it was just before removal."""

    external_id: str
    local_id: str
