"""Unit tests for link domain value objects."""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from linkstore.domain.link.model import AccountLink, ExternalId, LinkingCode, LocalId


class TestLocalId:
    def test_accepts_uuid_and_text(self):
        raw = uuid4()

        assert LocalId(raw) == LocalId(str(raw))
        assert str(LocalId(raw)) == str(raw)

    def test_generate_is_unique(self):
        assert LocalId.generate() != LocalId.generate()

    def test_rejects_non_uuid(self):
        with pytest.raises(ValidationError):
            LocalId("player-one")

    def test_is_hashable(self):
        raw = UUID("2c1d0e9f-8a7b-4c6d-9e5f-4a3b2c1d0e9f")

        assert {LocalId(raw): "x"}[LocalId(raw)] == "x"


class TestExternalId:
    def test_keeps_value(self):
        assert str(ExternalId("81344468327383040")) == "81344468327383040"

    @pytest.mark.parametrize("value", ["", " 1234", "12 34", "1234\n"])
    def test_rejects_empty_or_whitespace(self, value):
        with pytest.raises(ValidationError):
            ExternalId(value)

    def test_is_frozen(self):
        external_id = ExternalId("1")

        with pytest.raises(ValidationError):
            external_id.root = "2"

    def test_accepts_column_width(self):
        assert len(ExternalId("9" * 64).root) == 64

    def test_rejects_ids_longer_than_column(self):
        """An id the external_id column cannot hold should fail at construction, on every backend."""
        with pytest.raises(ValidationError):
            ExternalId("9" * 65)


class TestAccountLink:
    def test_equality_by_value(self):
        local_id = LocalId.generate()

        assert AccountLink(local_id=local_id, external_id=ExternalId("5")) == AccountLink(
            local_id=local_id, external_id=ExternalId("5")
        )


class TestLinkingCode:
    """Tests for LinkingCode expiry."""

    def make_code(self, created_at: datetime) -> LinkingCode:
        return LinkingCode(code="1234", local_id=LocalId.generate(), created_at=created_at)

    def test_expires_at_adds_ttl(self):
        created_at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        code = self.make_code(created_at)

        assert code.expires_at(timedelta(minutes=10)) == created_at + timedelta(minutes=10)

    def test_fresh_code_is_not_expired(self):
        now = datetime.now(UTC)

        assert not self.make_code(now).is_expired(timedelta(minutes=10), now=now)

    def test_code_expires_at_ttl(self):
        created_at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        code = self.make_code(created_at)

        assert code.is_expired(timedelta(minutes=10), now=created_at + timedelta(minutes=10))
        assert not code.is_expired(timedelta(minutes=10), now=created_at + timedelta(minutes=9))
