"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DATA_FILE_NAME = "data.json"


@dataclass
class LogConfig:
    """Process logging configuration."""

    level: str = "info"
    format: str = "console"


@dataclass
class ScmtConfig:
    """Top-level scmt configuration."""

    configdir: Path = Path("/etc/scmt")
    logfile: Path = Path("/var/log/scmt.log")
    engineer: str = ""
    message: str = ""
    output_json: bool = False
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def datafile(self) -> Path:
        """Backing file of the configuration store."""
        return self.configdir / DATA_FILE_NAME
