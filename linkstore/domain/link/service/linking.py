"""Linking service for the out-of-band pairing handshake."""

import logging
import secrets
from datetime import UTC, datetime

from linkstore.config import LinkingConfig
from linkstore.domain.link.model.linking_code import LinkingCode
from linkstore.domain.link.model.value import ExternalId, LocalId
from linkstore.domain.link.port.code_registry import LinkingCodeRegistry
from linkstore.domain.link.port.link_store import LinkStore
from linkstore.domain.shared.error import InvalidStateError
from linkstore.domain.shared.service import Service

logger = logging.getLogger(__name__)

# Attempts at drawing an unused code before giving up
MAX_CODE_ATTEMPTS = 100


class LinkingService(Service):
    """Pairs a local identity with an external one through a short code.

    - issue_code: hand a fresh code to a local principal
    - redeem_code: the external platform echoes the code back; link the two
    - purge_expired: drop codes older than the configured TTL

    A code is single-use: redeeming deletes it whether or not it had expired.
    Issuing a code replaces any code still outstanding for the same local id.
    """

    _store: LinkStore
    _registry: LinkingCodeRegistry
    _config: LinkingConfig

    def issue_code(self, local_id: LocalId) -> LinkingCode:
        """Generate, store and return a new linking code for `local_id`.

        Raises:
            InvalidStateError: If no unused code could be drawn from the alphabet.
        """
        replaced = self._registry.delete_codes_for(local_id)
        if replaced:
            logger.debug("Replaced %d outstanding code(s) for local_id=%s", replaced, local_id)

        outstanding = self._registry.list_codes()
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._make_code()
            if code not in outstanding:
                break
        else:
            raise InvalidStateError(
                "Linking code space exhausted", code="linking_code_space_exhausted"
            )

        linking_code = self._registry.store_code(code, local_id)
        logger.info("Issued linking code for local_id=%s", local_id)
        return linking_code

    def redeem_code(self, code: str, external_id: ExternalId) -> LocalId | None:
        """Consume `code` and link its local identity to `external_id`.

        Returns:
            The local id now linked to `external_id`, or None if the code was
            unknown or expired.
        """
        linking_code = self._registry.consume_code(code.strip())
        if linking_code is None:
            logger.info("Unknown linking code presented by external_id=%s", external_id)
            return None

        if linking_code.is_expired(self._config.code_ttl, now=datetime.now(UTC)):
            logger.info(
                "Expired linking code for local_id=%s presented by external_id=%s",
                linking_code.local_id,
                external_id,
            )
            return None

        self._store.set_link(linking_code.local_id, external_id)
        return linking_code.local_id

    def purge_expired(self) -> int:
        """Delete every code older than the TTL. Returns the number removed."""
        cutoff = datetime.now(UTC) - self._config.code_ttl
        purged = self._registry.purge_created_before(cutoff)
        if purged:
            logger.info("Purged %d expired linking code(s)", purged)
        return purged

    def _make_code(self) -> str:
        alphabet = self._config.code_alphabet
        return "".join(secrets.choice(alphabet) for _ in range(self._config.code_length))
