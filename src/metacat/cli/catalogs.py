"""Catalog lifecycle commands."""

from __future__ import annotations

import sys
from typing import Any, Optional

import typer
import yaml

from metacat.catalog import Catalog
from metacat.changes import CatalogChange, RemoveProperty, SetComment, SetProperty
from metacat.cli import _exitcodes as ec
from metacat.cli._output import print_error, print_object, print_table
from metacat.cli._registry import run
from metacat.errors import InvalidArgumentError
from metacat.identifiers import NameIdentifier, Namespace
from metacat.requests import decode_changes, decode_create_request


def _ident(metalake: str, name: str) -> NameIdentifier:
    try:
        return NameIdentifier.of(metalake, name)
    except InvalidArgumentError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)


def _parse_pairs(items: list[str] | None, option: str) -> list[tuple[str, str]]:
    """Parse KEY=VALUE options, keeping their order."""
    pairs: list[tuple[str, str]] = []
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint=option)
        k, v = item.split("=", 1)
        if not k:
            raise typer.BadParameter(f"Empty key in '{item}'", param_hint=option)
        pairs.append((k, v))
    return pairs


def _read_changes_file(path: str) -> Any:
    """Read a JSON or YAML change list from a file, or stdin for '-'."""
    try:
        if path == "-":
            text = sys.stdin.read()
        else:
            with open(path) as f:
                text = f.read()
        return yaml.safe_load(text)
    except OSError as e:
        print_error(f"Cannot read changes file '{path}': {e}")
        raise typer.Exit(ec.USAGE_ERROR)
    except yaml.YAMLError as e:
        print_error(f"Invalid changes file '{path}': {e}")
        raise typer.Exit(ec.USAGE_ERROR)


def _print_catalog(catalog: Catalog, json_mode: bool) -> None:
    print_object(catalog.to_dict(), json_mode=json_mode)


def list_cmd(
    metalake: str = typer.Argument(..., help="Metalake to list catalogs from"),
) -> None:
    """List catalogs under a metalake."""
    from metacat.cli import state

    try:
        namespace = Namespace.of_metalake(metalake)
    except InvalidArgumentError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    catalogs = run(lambda registry: registry.list_catalogs(namespace))
    if state.json_output:
        print_object({"catalogs": [c.to_dict() for c in catalogs]}, json_mode=True)
        return
    if not catalogs:
        print(f"No catalogs in metalake {metalake}")
        return
    print_table(
        ["name", "type", "comment", "revision"],
        [[c.name, c.type, c.comment, c.revision] for c in catalogs],
    )


def create_cmd(
    metalake: str = typer.Argument(..., help="Metalake to create the catalog in"),
    name: str = typer.Argument(..., help="Catalog name"),
    catalog_type: str = typer.Option(..., "--type", "-t", help="Catalog type"),
    comment: Optional[str] = typer.Option(None, "--comment", help="Catalog comment"),
    prop: Optional[list[str]] = typer.Option(
        None, "--property", "-p", help="Catalog property KEY=VALUE (repeatable)"
    ),
) -> None:
    """Create a catalog."""
    from metacat.cli import state

    try:
        request = decode_create_request(
            {
                "name": name,
                "type": catalog_type,
                "comment": comment,
                "properties": dict(_parse_pairs(prop, "--property")),
            }
        )
        ident = request.identifier(metalake)
    except InvalidArgumentError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    catalog = run(
        lambda registry: registry.create_catalog(
            ident, request.type, request.comment, request.properties
        )
    )
    _print_catalog(catalog, state.json_output)


def show_cmd(
    metalake: str = typer.Argument(..., help="Metalake of the catalog"),
    name: str = typer.Argument(..., help="Catalog name"),
) -> None:
    """Show one catalog."""
    from metacat.cli import state

    ident = _ident(metalake, name)
    catalog = run(lambda registry: registry.load_catalog(ident))
    _print_catalog(catalog, state.json_output)


def alter_cmd(
    metalake: str = typer.Argument(..., help="Metalake of the catalog"),
    name: str = typer.Argument(..., help="Catalog name"),
    changes_file: Optional[str] = typer.Option(
        None, "--changes", help="JSON/YAML change list file ('-' for stdin), applied first"
    ),
    comment: Optional[str] = typer.Option(None, "--comment", help="Replace the comment"),
    clear_comment: bool = typer.Option(False, "--clear-comment", help="Remove the comment"),
    set_props: Optional[list[str]] = typer.Option(
        None, "--set", help="Set property KEY=VALUE (repeatable)"
    ),
    remove_props: Optional[list[str]] = typer.Option(
        None, "--remove", help="Remove property KEY (repeatable)"
    ),
) -> None:
    """Apply changes to a catalog in one commit.

    File changes come first, then --comment/--clear-comment, then --set, then --remove.
    """
    from metacat.cli import state

    if comment is not None and clear_comment:
        print_error("--comment and --clear-comment are mutually exclusive")
        raise typer.Exit(ec.USAGE_ERROR)

    ident = _ident(metalake, name)
    changes: list[CatalogChange] = []
    try:
        if changes_file is not None:
            changes.extend(decode_changes(_read_changes_file(changes_file)))
        if comment is not None or clear_comment:
            changes.append(SetComment(comment))
        changes.extend(SetProperty(k, v) for k, v in _parse_pairs(set_props, "--set"))
        changes.extend(RemoveProperty(k) for k in remove_props or [])
    except InvalidArgumentError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if not changes:
        print_error("No changes given; use --changes, --comment, --set or --remove")
        raise typer.Exit(ec.USAGE_ERROR)

    catalog = run(lambda registry: registry.alter_catalog(ident, changes))
    _print_catalog(catalog, state.json_output)


def drop_cmd(
    metalake: str = typer.Argument(..., help="Metalake of the catalog"),
    name: str = typer.Argument(..., help="Catalog name"),
) -> None:
    """Drop a catalog. Dropping an absent catalog is not an error."""
    from metacat.cli import state

    ident = _ident(metalake, name)
    dropped = run(lambda registry: registry.drop_catalog(ident))
    if state.json_output:
        print_object({"catalog": str(ident), "dropped": dropped}, json_mode=True)
    elif dropped:
        print(f"Dropped catalog {ident}")
    else:
        print(f"Catalog {ident} does not exist; nothing to drop")
