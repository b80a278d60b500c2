"""Record value types shared by the configuration store and the change log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from scmt.errors import ParseError, ScmtError
from scmt.persistence import format_timestamp, parse_timestamp

# Synthetic option keys used in change records for non-option events.
ROLE_ADD = "ROLE_ADD"
ROLE_REMOVE = "ROLE_REMOVE"
TEMPLATE_WRITE = "TEMPLATE_WRITE"


class OutputFormat(StrEnum):
    """Rendering format for dump and log output."""

    JSON = "json"
    TABLE = "table"


def _require_mapping(document: Any, what: str) -> dict[str, Any]:
    if not isinstance(document, dict):
        raise ParseError(f"{what} must be a JSON object, got {type(document).__name__}")
    return document


def _require_str(document: dict[str, Any], key: str, what: str) -> str:
    value = document.get(key, "")
    if not isinstance(value, str):
        raise ParseError(f"{what}.{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class OptionRecord:
    """Current value of one configuration option and who last set it.

    Serialised in the store document as
    ``{"option": ..., "value": {"value", "engineer", "message", "changed"}}``.
    """

    option: str
    value: str
    engineer: str
    message: str
    changed: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "option": self.option,
            "value": {
                "value": self.value,
                "engineer": self.engineer,
                "message": self.message,
                "changed": format_timestamp(self.changed),
            },
        }

    @classmethod
    def from_document(cls, document: Any) -> OptionRecord:
        element = _require_mapping(document, "element")
        option = _require_str(element, "option", "element")
        if not option:
            raise ParseError("element.option must not be empty")
        value = _require_mapping(element.get("value"), f"element {option!r} value")
        return cls(
            option=option,
            value=_require_str(value, "value", option),
            engineer=_require_str(value, "engineer", option),
            message=_require_str(value, "message", option),
            changed=parse_timestamp(value.get("changed")),
        )


@dataclass(frozen=True)
class ChangeRecord:
    """One immutable change log entry.

    ``option`` is either an option key or a synthetic marker such as
    ``ROLE_ADD``; ``value`` is the new value or the role name.
    """

    option: str
    value: str
    engineer: str
    message: str
    changed: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "option": self.option,
            "value": self.value,
            "engineer": self.engineer,
            "message": self.message,
            "changed": format_timestamp(self.changed),
        }

    @classmethod
    def from_document(cls, document: Any) -> ChangeRecord:
        record = _require_mapping(document, "record")
        return cls(
            option=_require_str(record, "option", "record"),
            value=_require_str(record, "value", "record"),
            engineer=_require_str(record, "engineer", "record"),
            message=_require_str(record, "message", "record"),
            changed=parse_timestamp(record.get("changed")),
        )


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a store mutation.

    ``changed`` reports the state change; ``audit_error`` carries the failure
    of the best-effort change log write, if any.  A failed audit write never
    turns into a failed mutation.
    """

    changed: bool
    audit_error: ScmtError | None = None

    @property
    def audited(self) -> bool:
        """True when a change was made and its change record was persisted."""
        return self.changed and self.audit_error is None
