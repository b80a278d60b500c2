"""Append-only change log persisted as a single JSON document.

Document shape::

    {"records": [{"option", "value", "engineer", "message", "changed"}, ...]}

Records are appended in memory and the whole sequence is rewritten on every
persist.  A missing backing file is a first run, not an error.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

import structlog

from scmt.errors import ParseError
from scmt.models.records import ChangeRecord, OutputFormat
from scmt.persistence import read_json_document, utcnow, write_json_document
from scmt.render import coerce_format, format_table_time, render_table, write_json, write_output

_log = structlog.get_logger(component="changelog")

_TABLE_HEADERS = ("Value", "Engineer", "Changed", "Message")


class ChangeLog:
    """History of every mutation applied to options and roles.

    Args:
        logfile: Backing JSON file.  Loaded immediately on construction.
        clock:   Source of UTC timestamps for new records.

    Raises:
        ParseError: the backing file exists but is malformed.
        PersistenceError: the backing file exists but cannot be read.
    """

    def __init__(self, logfile: Path | str, clock: Callable[[], datetime] = utcnow) -> None:
        self.logfile = Path(logfile)
        self._clock = clock
        self._records: list[ChangeRecord] = []
        self.load()

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[ChangeRecord, ...]:
        """All records in insertion order."""
        return tuple(self._records)

    def append(self, option: str, value: str, engineer: str, message: str) -> ChangeRecord:
        """Add a record stamped with the current UTC time.  Does not persist."""
        record = ChangeRecord(
            option=option,
            value=value,
            engineer=engineer,
            message=message,
            changed=self._clock(),
        )
        self._records.append(record)
        return record

    def persist(self) -> None:
        """Overwrite the backing file with the full record sequence."""
        write_json_document(self.logfile, self.to_document())
        _log.debug("changelog_persisted", path=str(self.logfile), records=len(self._records))

    def load(self) -> None:
        """Replace the in-memory sequence with the backing file contents.

        A missing backing file leaves the sequence empty.  On a parse failure
        the previous sequence is left untouched.
        """
        if not self.logfile.exists():
            _log.debug("changelog_absent", path=str(self.logfile))
            self._records = []
            return
        self._records = self._decode(read_json_document(self.logfile))

    def log_and_persist(self, option: str, value: str, engineer: str, message: str) -> ChangeRecord:
        """Append a record and persist the log.

        If persisting fails the appended record stays in memory, so memory
        and disk may differ by that one record.
        """
        record = self.append(option, value, engineer, message)
        _log.info("change_logged", option=option, value=value, engineer=engineer)
        self.persist()
        return record

    def select(self, option: str) -> list[ChangeRecord]:
        """Return the records for *option*, most recent first.

        Records with equal timestamps keep their insertion order.
        """
        matches = [r for r in self._records if r.option == option]
        return sorted(matches, key=lambda r: r.changed, reverse=True)

    def render(self, option: str, fmt: str | OutputFormat, destination: TextIO) -> None:
        """Write the history of *option* to *destination* as JSON or a table."""
        dataset = self.select(option)
        if coerce_format(fmt) is OutputFormat.JSON:
            write_json(destination, [r.to_document() for r in dataset])
            return
        rows = [(r.value, r.engineer, format_table_time(r.changed), r.message) for r in dataset]
        write_output(destination, render_table(_TABLE_HEADERS, rows))

    def to_document(self) -> dict[str, Any]:
        return {"records": [r.to_document() for r in self._records]}

    @staticmethod
    def _decode(document: Any) -> list[ChangeRecord]:
        if not isinstance(document, dict):
            raise ParseError(f"change log must be a JSON object, got {type(document).__name__}")
        raw = document.get("records") or []
        if not isinstance(raw, list):
            raise ParseError("change log 'records' must be a list")
        return [ChangeRecord.from_document(item) for item in raw]
