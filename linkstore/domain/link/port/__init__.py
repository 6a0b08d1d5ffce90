from linkstore.domain.link.port.code_registry import LinkingCodeRegistry
from linkstore.domain.link.port.link_store import LinkStore
from linkstore.domain.link.port.notifier import LinkEventNotifier

__all__ = ["LinkEventNotifier", "LinkStore", "LinkingCodeRegistry"]
