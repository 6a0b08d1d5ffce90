import logging
from collections import defaultdict
from typing import Callable, Type

from linkstore.domain.link.event.events import AccountLinked, AccountUnlinked
from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.link.port.notifier import LinkEventNotifier
from linkstore.domain.shared.event import Event

logger = logging.getLogger(__name__)

EventHandlerFunc = Callable[[Event], None]


class InMemoryLinkEventBus(LinkEventNotifier):
    """Turns store hooks into AccountLinked/AccountUnlinked events for in-process subscribers.

    Handlers run synchronously in subscription order; a failing handler
    propagates to the store's caller.
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[Event], list[EventHandlerFunc]] = defaultdict(list)

    def subscribe(self, event_type: Type[Event], handler: EventHandlerFunc) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: Event) -> None:
        event_type = type(event)
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug("No handlers for event %s", event_type.__name__)
            return

        logger.debug("Publishing event %s to %d handlers", event_type.__name__, len(handlers))
        for handler in handlers:
            handler(event)

    def on_linked(self, external_id: ExternalId, local_id: LocalId) -> None:
        self.publish(AccountLinked(external_id=str(external_id), local_id=str(local_id)))

    def on_unlinked(self, external_id: ExternalId, local_id: LocalId) -> None:
        self.publish(AccountUnlinked(external_id=str(external_id), local_id=str(local_id)))


class NullLinkEventNotifier(LinkEventNotifier):
    """Discards link transitions."""

    def on_linked(self, external_id: ExternalId, local_id: LocalId) -> None:
        pass

    def on_unlinked(self, external_id: ExternalId, local_id: LocalId) -> None:
        pass
