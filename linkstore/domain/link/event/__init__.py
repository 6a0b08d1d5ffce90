from linkstore.domain.link.event.events import AccountLinked, AccountUnlinked

__all__ = ["AccountLinked", "AccountUnlinked"]
