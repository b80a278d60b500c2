"""Configuration loading from defaults, ``~/.scmt.yaml`` and environment.

Precedence, lowest first: built-in defaults, the YAML file, ``SCMT_*``
environment variables, explicit overrides (command-line flags).
"""

from __future__ import annotations

import getpass
import os
from pathlib import Path
from typing import Any

import yaml

from scmt.errors import ConfigError
from scmt.models.config import LogConfig, ScmtConfig

_ENV_PREFIX = "SCMT_"
_CONFIG_FILE_NAME = ".scmt.yaml"

_LOG_LEVEL_ALIASES = {
    "verbose": "debug",
    "warn": "warning",
    "quiet": "error",
}
_LOG_LEVELS = {"debug", "info", "warning", "error"}
_LOG_FORMATS = {"console", "json"}

_FILE_KEYS = {"configdir", "logfile", "engineer", "message", "json", "loglevel", "logformat"}


def _env(key: str, default: str | None = None) -> str | None:
    return os.environ.get(f"{_ENV_PREFIX}{key}", default)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def _validate_log_level(value: str) -> str:
    level = _LOG_LEVEL_ALIASES.get(value.lower(), value.lower())
    if level not in _LOG_LEVELS:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {sorted(_LOG_LEVELS)}")
    return level


def _validate_log_format(value: str) -> str:
    if value.lower() not in _LOG_FORMATS:
        raise ConfigError(f"Invalid log format: {value}. Must be one of {sorted(_LOG_FORMATS)}")
    return value.lower()


def _default_engineer() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def default_config_file() -> Path:
    """Location of the optional YAML config file."""
    override = _env("CONFIG_FILE")
    if override:
        return Path(override).expanduser()
    return Path.home() / _CONFIG_FILE_NAME


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return {k: v for k, v in data.items() if k in _FILE_KEYS and v is not None}


def _read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key in _FILE_KEYS:
        raw = _env(key.upper())
        if raw is not None and raw != "":
            values[key] = raw
    return values


def load_config(config_file: Path | None = None, **overrides: Any) -> ScmtConfig:
    """Resolve the scmt configuration.

    Args:
        config_file: YAML file to read; defaults to ``~/.scmt.yaml``.
        overrides:   Highest-precedence values keyed like the YAML file
                     (``configdir``, ``logfile``, ``engineer``, ``message``,
                     ``json``, ``loglevel``, ``logformat``).  None is ignored.

    Raises:
        ConfigError: an invalid value or a malformed config file.
    """
    merged: dict[str, Any] = {
        "configdir": "/etc/scmt",
        "logfile": "/var/log/scmt.log",
        "engineer": _default_engineer(),
        "message": "",
        "json": False,
        "loglevel": "info",
        "logformat": "console",
    }
    merged.update(_read_config_file(config_file or default_config_file()))
    merged.update(_read_env())
    unknown = set(overrides) - _FILE_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")
    merged.update({k: v for k, v in overrides.items() if v is not None})

    return ScmtConfig(
        configdir=Path(str(merged["configdir"])).expanduser(),
        logfile=Path(str(merged["logfile"])).expanduser(),
        engineer=str(merged["engineer"]),
        message=str(merged["message"]),
        output_json=_as_bool(merged["json"]),
        log=LogConfig(
            level=_validate_log_level(str(merged["loglevel"])),
            format=_validate_log_format(str(merged["logformat"])),
        ),
    )
