"""Shared test fixtures for metacat tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from metacat import (
    CatalogRegistry,
    MemoryCatalogStore,
    NameIdentifier,
    Namespace,
    SqliteCatalogStore,
    StaticMetalakeDirectory,
)

METALAKE = "lake"


class FixedClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI runs configure structlog globally; undo it between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def ns() -> Namespace:
    return Namespace.of_metalake(METALAKE)


@pytest.fixture
def ident() -> NameIdentifier:
    return NameIdentifier.of(METALAKE, "hive_prod")


@pytest.fixture
def directory() -> StaticMetalakeDirectory:
    return StaticMetalakeDirectory([METALAKE, "other"])


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database path."""
    return str(tmp_path / "test.db")


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_db):
    """Every local store implementation, one per test run."""
    if request.param == "memory":
        s = MemoryCatalogStore()
    else:
        s = SqliteCatalogStore(tmp_db)
    yield s
    s.close()


@pytest.fixture
def registry(store, directory, clock):
    return CatalogRegistry(
        store,
        directory,
        principal_provider=lambda: "alice",
        clock=clock,
    )
