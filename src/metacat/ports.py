"""Contracts the registry depends on: catalog storage and metalake lookup."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from metacat.catalog import Catalog
from metacat.identifiers import NameIdentifier, Namespace


@runtime_checkable
class CatalogStoreProtocol(Protocol):
    """Backend-agnostic catalog store.

    Every method raises ``UnavailableError`` when the backend cannot answer.
    ``insert_if_absent``, ``compare_and_swap`` and ``compare_and_delete`` must be
    atomic with respect to concurrent callers on the same identifier.
    """

    def get(self, ident: NameIdentifier) -> Catalog | None: ...

    def insert_if_absent(self, ident: NameIdentifier, catalog: Catalog) -> bool: ...

    def list(self, namespace: Namespace) -> list[Catalog]: ...

    def compare_and_swap(
        self, ident: NameIdentifier, expected_revision: int, catalog: Catalog
    ) -> bool: ...

    def compare_and_delete(
        self, ident: NameIdentifier, expected_revision: int | None = None
    ) -> bool: ...

    def close(self) -> None: ...


@runtime_checkable
class MetalakeDirectoryProtocol(Protocol):
    """Answers whether the metalake behind a namespace exists."""

    def exists(self, namespace: Namespace) -> bool: ...
