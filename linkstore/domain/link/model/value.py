"""Value objects for the link domain."""

import re
from uuid import UUID, uuid4

from pydantic import field_validator

from linkstore.domain.shared.model.value import RootValueObject

_WHITESPACE = re.compile(r"\s")

# Width of the external_id column
EXTERNAL_ID_MAX_LENGTH = 64


class LocalId(RootValueObject[UUID]):
    """Identifier of a principal on the local platform (a 128-bit UUID)."""

    @classmethod
    def generate(cls) -> "LocalId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)


class ExternalId(RootValueObject[str]):
    """Opaque identifier issued by the external messaging platform.

    Usually a numeric snowflake such as ``"81344468327383040"``, but only
    non-emptiness, the absence of whitespace and a 64 character limit are
    enforced.
    """

    @field_validator("root")
    @classmethod
    def validate_external_id(cls, v: str) -> str:
        if not v:
            raise ValueError("External id must not be empty")
        if len(v) > EXTERNAL_ID_MAX_LENGTH:
            raise ValueError(f"External id must be at most {EXTERNAL_ID_MAX_LENGTH} characters")
        if _WHITESPACE.search(v):
            raise ValueError(f"External id must not contain whitespace: {v!r}")
        return v

    def __str__(self) -> str:
        return self.root
