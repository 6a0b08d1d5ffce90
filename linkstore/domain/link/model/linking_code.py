"""LinkingCode value object: a short-lived pairing token."""

from datetime import UTC, datetime, timedelta

from linkstore.domain.link.model.value import LocalId
from linkstore.domain.shared.model.value import ValueObject


class LinkingCode(ValueObject):
    """A code handed to a local principal, to be echoed back from the external platform.

    Redeeming the code links the external identity that presented it to `local_id`.
    """

    code: str
    local_id: LocalId
    created_at: datetime

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.created_at + ttl

    def is_expired(self, ttl: timedelta, now: datetime | None = None) -> bool:
        """Check whether the code is older than `ttl` at `now` (defaults to the current UTC time)."""
        return (now or datetime.now(UTC)) >= self.expires_at(ttl)
