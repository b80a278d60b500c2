"""Shared persistence helpers for the store and the change log.

Both backing files are whole-document JSON: read entirely, held in memory,
written back entirely.  There is no locking; concurrent writers race and the
last one wins.
"""

from __future__ import annotations

import json
import os
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from scmt.errors import ParseError, PersistenceError

_log = structlog.get_logger(component="persistence")

DIR_MODE = 0o755
BACKUP_SUFFIX = ".bck"

# Go and other RFC3339 producers emit nanoseconds; datetime keeps microseconds.
_RE_FRACTION = re.compile(r"(\.\d{6})\d+")


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def format_timestamp(value: datetime) -> str:
    """Render *value* as an RFC3339 UTC timestamp with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Raises:
        ParseError: if *text* is not a string or not a valid timestamp.
    """
    if not isinstance(text, str):
        raise ParseError(f"timestamp must be a string, got {type(text).__name__}")
    normalised = _RE_FRACTION.sub(r"\1", text.strip())
    if normalised.endswith(("Z", "z")):
        normalised = normalised[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalised)
    except ValueError as exc:
        raise ParseError(f"invalid timestamp {text!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def read_json_document(path: Path) -> Any:
    """Read and decode the JSON document at *path*.

    Raises:
        PersistenceError: the file cannot be opened or read.
        ParseError: the content is not valid UTF-8 JSON.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"cannot parse {path}: {exc}") from exc
    except OSError as exc:
        raise PersistenceError(f"cannot read {path}: {exc}", path=str(path), cause=exc) from exc


def dumps_indented(document: Any) -> str:
    """Encode *document* as two-space indented JSON with a trailing newline."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_json_document(path: Path, document: Any) -> None:
    """Encode *document* and overwrite *path* with it.

    Raises:
        PersistenceError: the file cannot be opened or written.
    """
    content = dumps_indented(document)
    try:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(content)
    except OSError as exc:
        raise PersistenceError(f"cannot write {path}: {exc}", path=str(path), cause=exc) from exc


def ensure_directory(path: Path, mode: int = DIR_MODE) -> None:
    """Create *path* and any missing parents.

    Raises:
        PersistenceError: the directory cannot be created.
    """
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"cannot create directory {path}: {exc}", path=str(path), cause=exc) from exc


def rotate_backup(path: Path) -> bool:
    """Move *path* to its ``.bck`` sibling, replacing any earlier backup.

    Failure is never fatal: returns False and logs at debug level.
    """
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    try:
        os.replace(path, backup)
    except OSError as exc:
        _log.debug("backup_skipped", path=str(path), reason=str(exc))
        return False
    _log.debug("backup_rotated", path=str(path), backup=str(backup))
    return True
