from linkstore.domain.link.model.account_link import AccountLink
from linkstore.domain.link.model.linking_code import LinkingCode
from linkstore.domain.link.model.value import ExternalId, LocalId

__all__ = ["AccountLink", "ExternalId", "LinkingCode", "LocalId"]
