"""Configuration store: the authoritative option and role snapshot.

Document shape::

    {
      "elements": [{"option": ..., "value": {"value", "engineer", "message", "changed"}}],
      "roles": ["web-server", ...]
    }

Every state-changing mutation is first described to the change log, then
applied to the in-memory snapshot.  Change log writes are best-effort: a
failure is logged as a warning and reported in ``MutationResult.audit_error``,
never raised.  Persisting the snapshot is a separate, explicit ``save()``.

No cross-process locking is done.  Two processes running load/mutate/save
against the same file race, and the last save wins.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

import structlog

from scmt.changelog import ChangeLog
from scmt.errors import NotFoundError, ParseError, ScmtError
from scmt.models.records import ROLE_ADD, ROLE_REMOVE, MutationResult, OptionRecord, OutputFormat
from scmt.persistence import (
    ensure_directory,
    read_json_document,
    rotate_backup,
    utcnow,
    write_json_document,
)
from scmt.render import coerce_format, format_table_time, render_table, write_json, write_output
from scmt.store.defaults import DEFAULT_OPTIONS, INITIALIZE_MESSAGE

if TYPE_CHECKING:
    from scmt.models.config import ScmtConfig

_log = structlog.get_logger(component="store")

_TABLE_HEADERS = ("Name", "Value", "Engineer", "Changed", "Message")


class ConfigStore:
    """Options and roles of one machine, backed by a JSON file.

    Args:
        datafile:  Backing file of the snapshot.
        logfile:   Backing file of the change log.
        changelog: Change log to record mutations in.  Opened lazily from
                   *logfile* on the first mutation when not given.
        clock:     Source of UTC timestamps.
    """

    def __init__(
        self,
        datafile: Path | str,
        logfile: Path | str,
        changelog: ChangeLog | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.datafile = Path(datafile)
        self.logfile = Path(logfile)
        self._changelog = changelog
        self._clock = clock
        # option name -> record; dict order is the display order
        self._options: dict[str, OptionRecord] = {}
        self._roles: list[str] = []

    @classmethod
    def from_config(cls, config: ScmtConfig) -> ConfigStore:
        return cls(datafile=config.datafile, logfile=config.logfile)

    @property
    def configdir(self) -> Path:
        return self.datafile.parent

    @property
    def exists(self) -> bool:
        """True when the backing file is present on disk."""
        return self.datafile.exists()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get(self, name: str) -> OptionRecord:
        """Return the record for option *name*.

        Raises:
            NotFoundError: no option with that name exists.
        """
        try:
            return self._options[name]
        except KeyError:
            raise NotFoundError(f"option {name} not found") from None

    def options(self) -> Iterator[OptionRecord]:
        """Iterate over all option records in insertion order."""
        return iter(list(self._options.values()))

    def values(self) -> dict[str, str]:
        """Return a name -> value mapping of the current options."""
        return {name: record.value for name, record in self._options.items()}

    def list_roles(self) -> list[str]:
        """Return a copy of the assigned roles."""
        return list(self._roles)

    def has_role(self, role: str) -> bool:
        return role in self._roles

    def __len__(self) -> int:
        return len(self._options)

    def __contains__(self, name: object) -> bool:
        return name in self._options

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(self, name: str, value: str, engineer: str, message: str) -> MutationResult:
        """Create or update option *name*.

        Setting an option to its current value is a no-op: nothing is
        logged and ``changed`` is False.
        """
        current = self._options.get(name)
        if current is not None and current.value == value:
            _log.debug("option_unchanged", option=name)
            return MutationResult(changed=False)

        audit_error = self.log_change(name, value, engineer, message)
        self._options[name] = OptionRecord(
            option=name,
            value=value,
            engineer=engineer,
            message=message,
            changed=self._clock(),
        )
        if current is None:
            _log.debug("option_created", option=name, value=value, engineer=engineer)
        else:
            _log.debug("option_changed", option=name, old=current.value, new=value, engineer=engineer)
        return MutationResult(changed=True, audit_error=audit_error)

    def safe_set(self, name: str, value: str, engineer: str, message: str) -> MutationResult:
        """Set option *name* and save the store, but only if it changed."""
        result = self.set(name, value, engineer, message)
        if result.changed:
            self.save()
        return result

    def add_role(self, role: str, engineer: str, message: str) -> MutationResult:
        """Assign *role*.  Adding a role that is already assigned is a no-op."""
        if role in self._roles:
            _log.debug("role_already_assigned", role=role)
            return MutationResult(changed=False)
        self._roles.append(role)
        audit_error = self.log_change(ROLE_ADD, role, engineer, message)
        _log.debug("role_added", role=role, engineer=engineer)
        return MutationResult(changed=True, audit_error=audit_error)

    def remove_role(self, role: str, engineer: str, message: str) -> MutationResult:
        """Unassign *role*, keeping the order of the remaining roles.

        Raises:
            NotFoundError: *role* is not assigned.
        """
        if role not in self._roles:
            raise NotFoundError(f"role {role} not found")
        self._roles.remove(role)
        audit_error = self.log_change(ROLE_REMOVE, role, engineer, message)
        _log.debug("role_removed", role=role, engineer=engineer)
        return MutationResult(changed=True, audit_error=audit_error)

    def initialize(self, engineer: str) -> dict[str, MutationResult]:
        """Apply the default option table, tagged with message ``Initialize``."""
        results = {
            name: self.set(name, value, engineer, INITIALIZE_MESSAGE)
            for name, value in DEFAULT_OPTIONS.items()
        }
        _log.info(
            "store_initialized",
            engineer=engineer,
            changed=sum(1 for r in results.values() if r.changed),
        )
        return results

    def log_change(self, option: str, value: str, engineer: str, message: str) -> ScmtError | None:
        """Record a change in the change log without ever raising.

        Returns the error of a failed write, or None on success.
        """
        try:
            if self._changelog is None:
                self._changelog = ChangeLog(self.logfile, clock=self._clock)
            self._changelog.log_and_persist(option, value, engineer, message)
        except ScmtError as exc:
            _log.warning("audit_write_failed", option=option, logfile=str(self.logfile), error=str(exc))
            return exc
        return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace the snapshot with the contents of the backing file.

        The document is decoded completely before anything is replaced, so a
        parse failure leaves the current snapshot untouched.

        Raises:
            NotFoundError: the backing file does not exist.
            ParseError: the backing file is malformed.
        """
        if not self.exists:
            raise NotFoundError(f"configfile {self.datafile} not found")
        options, roles = self._decode(read_json_document(self.datafile))
        self._options, self._roles = options, roles
        _log.debug("store_loaded", path=str(self.datafile), options=len(options), roles=len(roles))

    def save(self) -> None:
        """Write the snapshot to the backing file.

        The directory is created when missing and the previous file is moved
        to a ``.bck`` sibling first; a failed backup is not an error.
        """
        ensure_directory(self.configdir)
        rotate_backup(self.datafile)
        write_json_document(self.datafile, self.to_document())
        _log.debug("store_saved", path=str(self.datafile), options=len(self._options), roles=len(self._roles))

    def to_document(self) -> dict[str, Any]:
        return {
            "elements": [record.to_document() for record in self._options.values()],
            "roles": list(self._roles),
        }

    def dump(self, fmt: str | OutputFormat, destination: TextIO) -> None:
        """Write the current options to *destination*.

        JSON output is a plain name -> value object with sorted keys; the
        table keeps insertion order and also shows engineer, change time
        and message.
        """
        if coerce_format(fmt) is OutputFormat.JSON:
            write_json(destination, dict(sorted(self.values().items())))
            return
        rows = [
            (r.option, r.value, r.engineer, format_table_time(r.changed), r.message)
            for r in self._options.values()
        ]
        write_output(destination, render_table(_TABLE_HEADERS, rows))

    @staticmethod
    def _decode(document: Any) -> tuple[dict[str, OptionRecord], list[str]]:
        if not isinstance(document, dict):
            raise ParseError(f"store document must be a JSON object, got {type(document).__name__}")
        elements = document.get("elements") or []
        roles = document.get("roles") or []
        if not isinstance(elements, list):
            raise ParseError("store 'elements' must be a list")
        if not isinstance(roles, list):
            raise ParseError("store 'roles' must be a list")

        options: dict[str, OptionRecord] = {}
        for element in elements:
            record = OptionRecord.from_document(element)
            if record.option in options:
                raise ParseError(f"duplicate option {record.option!r} in store document")
            options[record.option] = record

        decoded_roles: list[str] = []
        for role in roles:
            if not isinstance(role, str):
                raise ParseError(f"role must be a string, got {type(role).__name__}")
            if role in decoded_roles:
                raise ParseError(f"duplicate role {role!r} in store document")
            decoded_roles.append(role)
        return options, decoded_roles
