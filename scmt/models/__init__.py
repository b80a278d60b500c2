"""Core data structures for scmt."""

from scmt.models.config import LogConfig, ScmtConfig
from scmt.models.records import (
    ROLE_ADD,
    ROLE_REMOVE,
    TEMPLATE_WRITE,
    ChangeRecord,
    MutationResult,
    OptionRecord,
    OutputFormat,
)

__all__ = [
    "ROLE_ADD",
    "ROLE_REMOVE",
    "TEMPLATE_WRITE",
    "ChangeRecord",
    "LogConfig",
    "MutationResult",
    "OptionRecord",
    "OutputFormat",
    "ScmtConfig",
]
