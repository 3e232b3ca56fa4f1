"""Catalog registry: lifecycle operations and atomic change application."""

from __future__ import annotations

import getpass
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from metacat.catalog import INITIAL_REVISION, AuditInfo, Catalog
from metacat.changes import CatalogChange, RemoveProperty, SetComment, SetProperty, apply_changes
from metacat.errors import (
    CatalogAlreadyExistsError,
    CatalogNotFoundError,
    ConcurrentModificationError,
    InternalError,
    InvalidArgumentError,
    MetacatError,
    NamespaceNotFoundError,
)
from metacat.identifiers import NameIdentifier, Namespace
from metacat.logs import get_logger
from metacat.ports import CatalogStoreProtocol, MetalakeDirectoryProtocol

_CHANGE_TYPES = (SetComment, SetProperty, RemoveProperty)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def default_principal() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No passwd entry for the current uid, e.g. in containers.
        return "anonymous"


def _check_namespace(namespace: object) -> Namespace:
    if not isinstance(namespace, Namespace):
        raise InvalidArgumentError(f"Expected a Namespace, got {type(namespace).__name__}")
    if len(namespace) != 1:
        raise InvalidArgumentError(
            f"Catalog namespace must be a single metalake level, got '{namespace}'"
        )
    return namespace


def _check_ident(ident: object) -> NameIdentifier:
    if not isinstance(ident, NameIdentifier):
        raise InvalidArgumentError(f"Expected a NameIdentifier, got {type(ident).__name__}")
    _check_namespace(ident.namespace)
    return ident


def _check_properties(properties: Mapping[str, str] | None) -> dict[str, str]:
    if properties is None:
        return {}
    if not isinstance(properties, Mapping):
        raise InvalidArgumentError("Catalog properties must be a mapping")
    for key, value in properties.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidArgumentError(
                f"Catalog property {key!r} must map a string key to a string value"
            )
    return dict(properties)


class CatalogRegistry:
    """Resolves identifiers, enforces invariants, and commits catalog changes.

    Holds no mutable state of its own; all coordination between concurrent
    callers goes through the store's atomic primitives. Nothing is retried.
    """

    def __init__(
        self,
        store: CatalogStoreProtocol,
        directory: MetalakeDirectoryProtocol,
        *,
        logger: Any | None = None,
        principal_provider: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._log = (logger or get_logger("metacat.registry")).bind(component="registry")
        self._principal = principal_provider or default_principal
        self._clock = clock or _now

    @contextmanager
    def _operation(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except MetacatError as e:
            self._log.warning(
                "Catalog operation failed",
                operation=operation,
                error_kind=e.kind.value,
                error=str(e),
                **context,
            )
            raise
        except Exception as e:
            self._log.exception(
                "Unexpected error in catalog operation", operation=operation, **context
            )
            raise InternalError(operation) from e

    def _require_metalake(self, namespace: Namespace) -> None:
        if not self._directory.exists(namespace):
            raise NamespaceNotFoundError(namespace)

    # --- Operations ---

    def list_catalogs(self, namespace: Namespace) -> list[Catalog]:
        """Return all catalogs under a metalake, sorted by name."""
        with self._operation("list", namespace=str(namespace)):
            _check_namespace(namespace)
            self._require_metalake(namespace)
            catalogs = [c for c in self._store.list(namespace) if c.namespace == namespace]
            return sorted(catalogs, key=lambda c: c.name)

    def create_catalog(
        self,
        ident: NameIdentifier,
        type: str,
        comment: str | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> Catalog:
        """Register a new catalog. At most one concurrent creator wins."""
        with self._operation("create", ident=str(ident)):
            _check_ident(ident)
            if not isinstance(type, str) or not type:
                raise InvalidArgumentError("Catalog type cannot be empty")
            if comment is not None and not isinstance(comment, str):
                raise InvalidArgumentError("Catalog comment must be a string")
            props = _check_properties(properties)

            self._require_metalake(ident.namespace)

            catalog = Catalog(
                ident=ident,
                type=type,
                comment=comment,
                properties=props,
                audit=AuditInfo(creator=self._principal(), create_time=self._clock()),
                revision=INITIAL_REVISION,
            )
            if not self._store.insert_if_absent(ident, catalog):
                raise CatalogAlreadyExistsError(ident)

            self._log.info("Created catalog", ident=str(ident), type=type)
            return catalog

    def load_catalog(self, ident: NameIdentifier) -> Catalog:
        with self._operation("load", ident=str(ident)):
            _check_ident(ident)
            self._require_metalake(ident.namespace)
            catalog = self._store.get(ident)
            if catalog is None:
                raise CatalogNotFoundError(ident)
            return catalog

    def alter_catalog(self, ident: NameIdentifier, changes: Iterable[CatalogChange]) -> Catalog:
        """Apply an ordered change list as one all-or-nothing commit.

        The commit is conditional on the revision that was loaded; if another
        writer got there first, ``ConcurrentModificationError`` is raised and
        nothing is written.
        """
        with self._operation("alter", ident=str(ident)):
            _check_ident(ident)
            change_list = list(changes)
            for change in change_list:
                if not isinstance(change, _CHANGE_TYPES):
                    raise InvalidArgumentError(
                        f"Unknown catalog change type: {type(change).__name__}"
                    )

            if not self._directory.exists(ident.namespace):
                raise CatalogNotFoundError(ident)
            current = self._store.get(ident)
            if current is None:
                raise CatalogNotFoundError(ident)
            if not change_list:
                return current

            updated = apply_changes(current, change_list)
            updated = replace(
                updated,
                audit=current.audit.modified(self._principal(), self._clock()),
                revision=current.revision + 1,
            )
            if not self._store.compare_and_swap(ident, current.revision, updated):
                raise ConcurrentModificationError(ident, current.revision)

            self._log.info(
                "Altered catalog",
                ident=str(ident),
                changes=len(change_list),
                revision=updated.revision,
            )
            return updated

    def drop_catalog(self, ident: NameIdentifier) -> bool:
        """Remove a catalog. Returns False when there was nothing to remove."""
        with self._operation("drop", ident=str(ident)):
            _check_ident(ident)
            dropped = self._store.compare_and_delete(ident)
            if dropped:
                self._log.info("Dropped catalog", ident=str(ident))
            else:
                self._log.info("Catalog to drop was already absent", ident=str(ident))
            return dropped
