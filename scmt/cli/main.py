"""Click command group for scmt.

Every command resolves configuration, sets up logging, performs one
operation against the store or change log and exits.  Any ScmtError is
reported and turned into a non-zero exit status.
"""

from __future__ import annotations

import functools
import json
import sys
from collections.abc import Callable
from typing import Any, TypeVar

import click

from scmt import __version__
from scmt.changelog import ChangeLog
from scmt.config import load_config
from scmt.errors import ScmtError
from scmt.models.config import ScmtConfig
from scmt.models.records import MutationResult, OutputFormat
from scmt.observability.logging import get_logger, setup_logging
from scmt.persistence import format_timestamp
from scmt.store import ConfigStore
from scmt.templates import write_template

F = TypeVar("F", bound=Callable[..., Any])

_log = get_logger("cli")


def _handle_errors(func: F) -> F:
    """Report ScmtError as a ClickException so the process exits non-zero."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ScmtError as exc:
            _log.debug("command_failed", error=str(exc), error_type=type(exc).__name__)
            raise click.ClickException(str(exc)) from exc

    return wrapper  # type: ignore[return-value]


def _output_format(config: ScmtConfig) -> OutputFormat:
    return OutputFormat.JSON if config.output_json else OutputFormat.TABLE


def _echo_json(document: Any) -> None:
    click.echo(json.dumps(document, indent=2, ensure_ascii=False))


def _warn_unaudited(result: MutationResult) -> None:
    if result.audit_error is not None:
        click.echo(f"Warning: change not recorded in log: {result.audit_error}", err=True)


def _open_store(config: ScmtConfig) -> ConfigStore:
    store = ConfigStore.from_config(config)
    store.load()
    return store


pass_config = click.make_pass_decorator(ScmtConfig)


@click.group()
@click.option("-C", "--configdir", default=None, help="Directory for config files.")
@click.option("-E", "--engineer", default=None, help="Specify engineer name.")
@click.option("-l", "--loglevel", default=None, help="Specify loglevel (debug, info, warning, error).")
@click.option("-L", "--logfile", default=None, help="Specify logfile.")
@click.option("-M", "--message", default=None, help="Specify message.")
@click.option("-J", "--json", "output_json", is_flag=True, default=False, help="JSON output.")
@click.pass_context
def cli(
    ctx: click.Context,
    configdir: str | None,
    engineer: str | None,
    loglevel: str | None,
    logfile: str | None,
    message: str | None,
    output_json: bool,
) -> None:
    """Server configuration management tool.

    Keeps track of configuration options and roles of this machine and logs
    who changed what, when and why.
    """
    try:
        config = load_config(
            configdir=configdir,
            engineer=engineer,
            loglevel=loglevel,
            logfile=logfile,
            message=message,
            json=True if output_json else None,
        )
    except ScmtError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config.log.level, config.log.format)
    _log.debug("config_resolved", configdir=str(config.configdir), logfile=str(config.logfile))
    ctx.obj = config


@cli.command()
@pass_config
@_handle_errors
def init(config: ScmtConfig) -> None:
    """Initialize the configuration store with default values."""
    store = ConfigStore.from_config(config)
    if store.exists:
        _log.warning("store_overwritten", path=str(store.datafile))
    for result in store.initialize(config.engineer).values():
        _warn_unaudited(result)
    store.save()
    click.echo(f"Initialized {store.datafile}")


@cli.command("set")
@click.argument("name")
@click.argument("value")
@pass_config
@_handle_errors
def set_option(config: ScmtConfig, name: str, value: str) -> None:
    """Set option NAME to VALUE."""
    store = _open_store(config)
    result = store.safe_set(name, value, config.engineer, config.message)
    _warn_unaudited(result)
    if config.output_json:
        _echo_json({"action": "set", "option": name, "value": value, "changed": result.changed})
    elif result.changed:
        click.echo(f"{name} set to '{value}'")
    else:
        click.echo(f"{name} is already '{value}'")


@cli.command("get")
@click.argument("name")
@pass_config
@_handle_errors
def get_option(config: ScmtConfig, name: str) -> None:
    """Print the value of option NAME."""
    record = _open_store(config).get(name)
    if config.output_json:
        _echo_json(
            {
                "option": record.option,
                "value": record.value,
                "engineer": record.engineer,
                "message": record.message,
                "changed": format_timestamp(record.changed),
            }
        )
    else:
        click.echo(record.value)


@cli.command()
@pass_config
@_handle_errors
def dump(config: ScmtConfig) -> None:
    """Dump all options as a table or JSON."""
    _open_store(config).dump(_output_format(config), sys.stdout)


@cli.command("log")
@click.argument("name")
@pass_config
@_handle_errors
def show_log(config: ScmtConfig, name: str) -> None:
    """Show the change history of option NAME."""
    ChangeLog(config.logfile).render(name, _output_format(config), sys.stdout)


@cli.group()
def role() -> None:
    """Manage the roles assigned to this server."""


@role.command("add")
@click.argument("role_name", metavar="ROLE")
@pass_config
@_handle_errors
def role_add(config: ScmtConfig, role_name: str) -> None:
    """Add ROLE to the server."""
    store = _open_store(config)
    result = store.add_role(role_name, config.engineer, config.message)
    if result.changed:
        store.save()
    _warn_unaudited(result)
    if config.output_json:
        _echo_json(
            {
                "action": "add",
                "role": role_name,
                "changed": result.changed,
                "message": "Role added successfully" if result.changed else "Role already exists",
            }
        )
    elif result.changed:
        click.echo(f"Role '{role_name}' added successfully")
    else:
        click.echo(f"Role '{role_name}' already exists")


@role.command("remove")
@click.argument("role_name", metavar="ROLE")
@pass_config
@_handle_errors
def role_remove(config: ScmtConfig, role_name: str) -> None:
    """Remove ROLE from the server."""
    store = _open_store(config)
    result = store.remove_role(role_name, config.engineer, config.message)
    store.save()
    _warn_unaudited(result)
    if config.output_json:
        _echo_json(
            {
                "action": "remove",
                "role": role_name,
                "changed": result.changed,
                "message": "Role removed successfully",
            }
        )
    else:
        click.echo(f"Role '{role_name}' removed successfully")


@role.command("list")
@pass_config
@_handle_errors
def role_list(config: ScmtConfig) -> None:
    """List the roles assigned to the server."""
    roles = _open_store(config).list_roles()
    if config.output_json:
        _echo_json({"action": "list", "roles": roles, "count": len(roles)})
    elif not roles:
        click.echo("No roles assigned to this server")
    else:
        click.echo(f"Server roles ({len(roles)}):")
        for name in roles:
            click.echo(f"  - {name}")


@cli.command()
@click.argument("template", type=click.Path(dir_okay=False))
@click.argument("output", required=False, type=click.Path(dir_okay=False))
@pass_config
@_handle_errors
def write(config: ScmtConfig, template: str, output: str | None) -> None:
    """Render TEMPLATE with the server configuration to OUTPUT or stdout."""
    store = _open_store(config)
    text, audit_error = write_template(store, template, output, config.engineer)
    if output is None:
        click.echo(text, nl=False)
    elif audit_error is not None:
        click.echo(f"Warning: template write not recorded in log: {audit_error}", err=True)


@cli.command()
def version() -> None:
    """Print the scmt version."""
    click.echo(__version__)
