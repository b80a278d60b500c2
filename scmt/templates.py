"""Jinja2 template rendering against a read-only view of the store.

Templates see::

    config     -- option name -> value mapping
    roles      -- assigned roles
    timestamp  -- render time, ``YYYY-MM-DD HH:MM:SS`` local time
    engineer   -- who rendered the template
    has_role() -- role membership test

Example::

    TZ={{ config.TIMEZONE }}
    {% if has_role("web-server") %}listen 80;{% endif %}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import jinja2
import structlog

from scmt.errors import NotFoundError, ParseError, PersistenceError, ScmtError
from scmt.models.records import TEMPLATE_WRITE
from scmt.persistence import ensure_directory
from scmt.store import ConfigStore

_log = structlog.get_logger(component="templates")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class TemplateData:
    """Snapshot of the store handed to templates."""

    config: dict[str, str] = field(default_factory=dict)
    roles: tuple[str, ...] = ()
    timestamp: str = ""
    engineer: str = ""

    @classmethod
    def from_store(cls, store: ConfigStore, engineer: str, now: datetime | None = None) -> TemplateData:
        return cls(
            config=store.values(),
            roles=tuple(store.list_roles()),
            timestamp=(now or datetime.now()).strftime(TIMESTAMP_FORMAT),
            engineer=engineer,
        )

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def context(self) -> dict[str, Any]:
        return {
            "config": dict(self.config),
            "roles": list(self.roles),
            "timestamp": self.timestamp,
            "engineer": self.engineer,
            "has_role": self.has_role,
        }


def _build_environment(search_path: Path) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(search_path)),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["split"] = lambda value, sep=None: str(value).split(sep)
    env.filters["has_prefix"] = lambda value, prefix: str(value).startswith(prefix)
    env.filters["has_suffix"] = lambda value, suffix: str(value).endswith(suffix)
    return env


def render_template(template_file: Path | str, data: TemplateData) -> str:
    """Render *template_file* with *data*.

    Raises:
        NotFoundError: the template file, or a template it includes, does
            not exist.
        ParseError: the template is not valid UTF-8, has a syntax error or
            fails while rendering.
        PersistenceError: the template file cannot be read.
    """
    path = Path(template_file)
    if not path.is_file():
        raise NotFoundError(f"template {path} not found")
    env = _build_environment(path.parent.resolve())
    try:
        template = env.get_template(path.name)
        return template.render(**data.context())
    except jinja2.TemplateNotFound as exc:
        raise NotFoundError(f"template {exc.name} included from {path} not found") from exc
    except jinja2.TemplateSyntaxError as exc:
        raise ParseError(f"failed to parse template {path}: {exc.message} (line {exc.lineno})") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"failed to read template {path}: not valid UTF-8 ({exc.reason})") from exc
    except jinja2.TemplateError as exc:
        raise ParseError(f"failed to execute template {path}: {exc.message}") from exc
    except OSError as exc:
        raise PersistenceError(f"failed to read template {path}: {exc}", path=str(path), cause=exc) from exc
    except Exception as exc:
        raise ParseError(f"failed to execute template {path}: {type(exc).__name__}: {exc}") from exc


def write_template(
    store: ConfigStore,
    template_file: Path | str,
    output_file: Path | str | None,
    engineer: str,
) -> tuple[str, ScmtError | None]:
    """Render *template_file* from *store* and write it to *output_file*.

    Without *output_file* nothing is written; the caller prints the text.
    With one, a ``TEMPLATE_WRITE`` change record is logged on a best-effort
    basis.  Returns the rendered text and the audit error, if any.
    """
    text = render_template(template_file, TemplateData.from_store(store, engineer))
    if output_file is None:
        _log.debug("template_rendered", template=str(template_file))
        return text, None

    output = Path(output_file)
    ensure_directory(output.parent)
    try:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(text)
    except OSError as exc:
        raise PersistenceError(f"failed to create output file {output}: {exc}", path=str(output), cause=exc) from exc
    _log.info("template_written", template=str(template_file), output=str(output))

    audit_error = store.log_change(
        TEMPLATE_WRITE,
        f"{template_file} -> {output_file}",
        engineer,
        f"Template processing: {template_file}",
    )
    return text, audit_error
