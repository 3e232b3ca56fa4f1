"""metacat CLI: manage catalogs registered under metalakes."""

from __future__ import annotations

from typing import Optional

import typer

from metacat.cli import _exitcodes as ec
from metacat.cli import catalogs
from metacat.cli._output import print_error
from metacat.config import MetacatConfig, config_from_env, load_config
from metacat.errors import InvalidArgumentError
from metacat.logs import configure_logging

app = typer.Typer(
    name="metacat",
    help="metacat CLI for managing catalogs in a metalake.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    config: MetacatConfig = MetacatConfig()
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("metacat")
        except Exception:
            v = "unknown"
        print(f"metacat {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    storage_uri: Optional[str] = typer.Option(
        None,
        "--storage-uri",
        help="Catalog store URI (memory://, sqlite:///metacat.db or s3://bucket/prefix)",
    ),
    metalake: Optional[list[str]] = typer.Option(
        None,
        "--metalake",
        "-m",
        help="Known metalake name (repeatable; env METACAT_METALAKES is comma-separated)",
    ),
    principal: Optional[str] = typer.Option(
        None, "--principal", help="Acting principal recorded in audit info"
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar="METACAT_CONFIG",
        help="YAML config file path",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level for stderr"),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all metacat commands."""
    try:
        cfg = load_config(config) if config else MetacatConfig()
    except InvalidArgumentError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    cfg = config_from_env(cfg)

    # Explicit command-line options win over file and environment.
    if storage_uri:
        cfg.storage_uri = storage_uri
    if metalake:
        cfg.metalakes = list(metalake)
    if principal:
        cfg.principal = principal
    if log_level:
        cfg.log_level = log_level

    try:
        configure_logging(cfg.log_level, json=cfg.log_json)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")

    state.config = cfg
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="list")(catalogs.list_cmd)
app.command(name="create")(catalogs.create_cmd)
app.command(name="show")(catalogs.show_cmd)
app.command(name="alter")(catalogs.alter_cmd)
app.command(name="drop")(catalogs.drop_cmd)


def main() -> None:
    """Entry point for the metacat CLI."""
    app()
