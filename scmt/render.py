"""Output helpers shared by the store dump and the change log listing.

Tables are drawn with box characters and upper-cased headers; JSON is
two-space indented.  Both are written to any text sink.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, TextIO

from scmt.errors import PersistenceError, ValidationError
from scmt.models.records import OutputFormat
from scmt.persistence import dumps_indented

TABLE_TIME_FORMAT = "%Y-%m-%d %H:%M"


def coerce_format(fmt: str | OutputFormat) -> OutputFormat:
    """Return *fmt* as an OutputFormat.

    Raises:
        ValidationError: for anything other than ``json`` or ``table``.
    """
    try:
        return OutputFormat(fmt)
    except ValueError as exc:
        valid = ", ".join(f.value for f in OutputFormat)
        raise ValidationError(f"unknown output format {fmt!r}, expected one of: {valid}") from exc


def format_table_time(value: datetime) -> str:
    return value.strftime(TABLE_TIME_FORMAT)


def render_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render *rows* under *headers* as a bordered text table."""
    header_cells = [h.upper() for h in headers]
    body = [[str(cell) for cell in row] for row in rows]
    widths = [len(h) for h in header_cells]
    for row in body:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def rule(left: str, mid: str, right: str) -> str:
        return left + mid.join("─" * (w + 2) for w in widths) + right

    def line(cells: Sequence[str]) -> str:
        return "│" + "│".join(f" {c.ljust(w)} " for c, w in zip(cells, widths, strict=True)) + "│"

    out = [rule("┌", "┬", "┐"), line(header_cells)]
    if body:
        out.append(rule("├", "┼", "┤"))
        out.extend(line(row) for row in body)
    out.append(rule("└", "┴", "┘"))
    return "\n".join(out) + "\n"


def write_output(destination: TextIO, text: str) -> None:
    """Write *text* to *destination*, surfacing sink failures as PersistenceError."""
    try:
        destination.write(text)
        destination.flush()
    except OSError as exc:
        raise PersistenceError(f"cannot write output: {exc}", cause=exc) from exc


def write_json(destination: TextIO, document: Any) -> None:
    write_output(destination, dumps_indented(document))
