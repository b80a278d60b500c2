"""Tests for table and JSON output helpers."""

from __future__ import annotations

import io
import json

import pytest

from scmt.errors import ValidationError
from scmt.models.records import OutputFormat
from scmt.render import coerce_format, render_table, write_json


class TestCoerceFormat:
    def test_accepts_strings_and_enum(self) -> None:
        assert coerce_format("json") is OutputFormat.JSON
        assert coerce_format(OutputFormat.TABLE) is OutputFormat.TABLE

    def test_rejects_unknown(self) -> None:
        with pytest.raises(ValidationError, match="unknown output format"):
            coerce_format("csv")


class TestRenderTable:
    def test_columns_are_aligned(self) -> None:
        text = render_table(["Name", "Value"], [["TYPE", "server"], ["COUNTRY_CODE", "NL"]])
        lines = text.splitlines()
        assert lines[0].startswith("┌") and lines[-1].startswith("└")
        assert "│ NAME         │ VALUE  │" in lines
        assert "│ COUNTRY_CODE │ NL     │" in lines
        assert len({len(line) for line in lines}) == 1

    def test_empty_table_has_header_only(self) -> None:
        lines = render_table(["Value", "Engineer"], []).splitlines()
        assert len(lines) == 3
        assert "VALUE" in lines[1]


def test_write_json_is_indented() -> None:
    out = io.StringIO()
    write_json(out, {"TYPE": "server"})
    assert out.getvalue() == '{\n  "TYPE": "server"\n}\n'
    assert json.loads(out.getvalue()) == {"TYPE": "server"}
