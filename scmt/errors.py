"""Exception hierarchy for scmt.

Every error raised by the store, the change log and their collaborators
derives from ScmtError so that the command surface can report it and exit
non-zero without catching unrelated exceptions.
"""

from __future__ import annotations


class ScmtError(Exception):
    """Base class for all scmt errors."""


class NotFoundError(ScmtError, KeyError):
    """A named option, role or backing file does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class ParseError(ScmtError):
    """A backing document or template could not be decoded."""


class PersistenceError(ScmtError):
    """A file or directory could not be created, read, written or renamed."""

    def __init__(self, message: str, path: str = "", cause: OSError | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class ValidationError(ScmtError):
    """An argument is outside the set of accepted values."""


class ConfigError(ScmtError):
    """Configuration could not be resolved from defaults, file and environment."""
