"""Error hierarchy for linkstore.

Error layers:
- LinkStoreError: Base class for all linkstore errors
- DomainError: Business rule violations, validation failures
- InfrastructureError: System-level failures like storage/connectivity issues

A lookup that finds nothing is not an error; it returns None.
"""


class LinkStoreError(Exception):
    """Base class for all linkstore errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(LinkStoreError):
    """Base class for domain/business errors."""


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(LinkStoreError):
    """Base class for infrastructure/system errors."""


class StorageFailure(InfrastructureError):
    """A statement against the backing database failed.

    The driver exception is attached as ``__cause__``.
    """


class StorageUnavailableError(StorageFailure):
    """No database connection is available (never configured or already shut down)."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
