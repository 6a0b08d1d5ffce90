"""Storage representations of LocalId: native UUID column or canonical text."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeEngine

from linkstore.domain.link.model.value import LocalId


class LocalIdCodec(ABC):
    """Encodes LocalId for binding and decodes it from result rows.

    One codec is chosen per backend and shared by every table holding a local id.
    """

    native: ClassVar[bool]

    @abstractmethod
    def column_type(self) -> TypeEngine[Any]:
        """Column type used for local_id columns."""
        ...

    @abstractmethod
    def encode(self, local_id: LocalId) -> Any: ...

    @abstractmethod
    def decode(self, value: Any) -> LocalId:
        """Rebuild a LocalId from a stored value. Raises ValueError on malformed data."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NativeUuidCodec(LocalIdCodec):
    """Binds uuid.UUID values to the backend's native UUID type."""

    native = True

    def column_type(self) -> TypeEngine[Any]:
        return sa.Uuid(as_uuid=True, native_uuid=True)

    def encode(self, local_id: LocalId) -> UUID:
        return local_id.root

    def decode(self, value: Any) -> LocalId:
        if isinstance(value, UUID):
            return LocalId(value)
        return LocalId(UUID(str(value)))


class TextUuidCodec(LocalIdCodec):
    """Stores the canonical 36-character hyphenated form."""

    native = False

    def column_type(self) -> TypeEngine[Any]:
        return sa.String(36)

    def encode(self, local_id: LocalId) -> str:
        return str(local_id.root)

    def decode(self, value: Any) -> LocalId:
        return LocalId(UUID(value))


def codec_for(dialect: Dialect, native: bool | None = None) -> LocalIdCodec:
    """Pick the codec for a dialect.

    An explicit `native` wins; otherwise native UUIDs are used where the
    dialect supports them (PostgreSQL) and text everywhere else.
    """
    if native is None:
        native = bool(getattr(dialect, "supports_native_uuid", False))
    return NativeUuidCodec() if native else TextUuidCodec()
