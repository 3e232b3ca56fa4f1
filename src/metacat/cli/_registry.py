"""CLI helpers for building the registry from global CLI state."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

import typer

from metacat.cli import _exitcodes as ec
from metacat.cli._output import print_error
from metacat.directory import StaticMetalakeDirectory
from metacat.errors import MetacatError
from metacat.registry import CatalogRegistry, default_principal
from metacat.storage import open_store

T = TypeVar("T")


@contextmanager
def open_registry() -> Iterator[CatalogRegistry]:
    """Open store + directory from CLI state; close the store on exit."""
    from metacat.cli import state

    cfg = state.config
    store = open_store(cfg.storage_uri, config=cfg)
    principal = cfg.principal or default_principal()
    try:
        yield CatalogRegistry(
            store,
            StaticMetalakeDirectory(cfg.metalakes),
            principal_provider=lambda: principal,
        )
    finally:
        store.close()


def run(operation: Callable[[CatalogRegistry], T]) -> T:
    """Run one registry operation, mapping classified errors to exit codes."""
    try:
        with open_registry() as registry:
            return operation(registry)
    except MetacatError as e:
        print_error(str(e))
        raise typer.Exit(ec.for_error(e))
