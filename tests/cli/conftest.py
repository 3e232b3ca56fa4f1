"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from metacat.cli import app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "METACAT_STORAGE_URI",
        "METACAT_METALAKES",
        "METACAT_PRINCIPAL",
        "METACAT_CONFIG",
        "METACAT_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_db(tmp_path):
    """Storage URI for a temp SQLite database."""
    return f"sqlite:///{tmp_path}/cli_test.db"


@pytest.fixture
def seeded_db(runner, cli_db):
    """A store with two catalogs in metalake 'lake'."""
    invoke(
        runner,
        ["create", "lake", "hive", "--type", "relational", "--comment", "prod", "-p", "a=1"],
        cli_db,
    )
    invoke(runner, ["create", "lake", "files", "--type", "fileset"], cli_db)
    return cli_db


def invoke(
    runner: CliRunner,
    args: list[str],
    storage_uri: str | None = None,
    metalakes: tuple[str, ...] = ("lake",),
    **kwargs,
) -> "Result":
    """Invoke CLI with storage and metalake options injected before the subcommand."""
    prefix: list[str] = ["--principal", "tester"]
    if storage_uri:
        prefix += ["--storage-uri", storage_uri]
    for m in metalakes:
        prefix += ["--metalake", m]
    return runner.invoke(app, prefix + args, catch_exceptions=False, **kwargs)
