"""Tests for record value types and their document encoding."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from scmt.errors import ParseError, PersistenceError
from scmt.models.records import ChangeRecord, MutationResult, OptionRecord

_TS = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


class TestOptionRecord:
    def test_document_is_nested(self) -> None:
        record = OptionRecord("TYPE", "server", "alice", "Initialize", _TS)
        assert record.to_document() == {
            "option": "TYPE",
            "value": {
                "value": "server",
                "engineer": "alice",
                "message": "Initialize",
                "changed": "2026-02-18T12:00:00Z",
            },
        }

    def test_from_document(self) -> None:
        record = OptionRecord("TYPE", "server", "alice", "Initialize", _TS)
        assert OptionRecord.from_document(record.to_document()) == record

    def test_missing_metadata_defaults_to_empty(self) -> None:
        record = OptionRecord.from_document(
            {"option": "TYPE", "value": {"value": "server", "changed": "2026-02-18T12:00:00Z"}}
        )
        assert record.engineer == ""
        assert record.message == ""

    @pytest.mark.parametrize(
        "document",
        [
            "TYPE",
            {"option": "", "value": {"value": "x", "changed": "2026-02-18T12:00:00Z"}},
            {"option": "TYPE", "value": "server"},
            {"option": "TYPE", "value": {"value": 1, "changed": "2026-02-18T12:00:00Z"}},
            {"option": "TYPE", "value": {"value": "server"}},
        ],
    )
    def test_malformed_documents(self, document: object) -> None:
        with pytest.raises(ParseError):
            OptionRecord.from_document(document)

    def test_records_are_immutable(self) -> None:
        record = OptionRecord("TYPE", "server", "alice", "", _TS)
        with pytest.raises(AttributeError):
            record.value = "desktop"  # type: ignore[misc]


class TestChangeRecord:
    def test_document_is_flat(self) -> None:
        record = ChangeRecord("ROLE_ADD", "web-server", "bob", "new role", _TS)
        assert record.to_document() == {
            "option": "ROLE_ADD",
            "value": "web-server",
            "engineer": "bob",
            "message": "new role",
            "changed": "2026-02-18T12:00:00Z",
        }
        assert ChangeRecord.from_document(record.to_document()) == record

    def test_malformed_document(self) -> None:
        with pytest.raises(ParseError):
            ChangeRecord.from_document(["ROLE_ADD"])


class TestMutationResult:
    def test_audited_requires_change_and_no_error(self) -> None:
        assert MutationResult(changed=True).audited is True
        assert MutationResult(changed=False).audited is False
        assert MutationResult(changed=True, audit_error=PersistenceError("x")).audited is False
