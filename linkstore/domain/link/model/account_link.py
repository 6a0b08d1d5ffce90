from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.shared.model.value import ValueObject


class AccountLink(ValueObject):
    """The current pairing of one local identity with one external identity.

    Invariants:
    - at most one AccountLink exists per `local_id`
    - at most one AccountLink exists per `external_id`
    """

    local_id: LocalId
    external_id: ExternalId
