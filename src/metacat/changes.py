"""Catalog changes: pure descriptions of mutations, applied in order."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Union

from metacat.catalog import Catalog
from metacat.errors import InvalidArgumentError


def _require_str(value: object, what: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{what} must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class SetComment:
    """Replace the catalog comment. ``None`` clears it."""

    comment: str | None

    def __post_init__(self) -> None:
        if self.comment is not None:
            _require_str(self.comment, "Comment")


@dataclass(frozen=True)
class SetProperty:
    """Insert or overwrite one property."""

    key: str
    value: str

    def __post_init__(self) -> None:
        _require_str(self.key, "Property key")
        _require_str(self.value, "Property value")


@dataclass(frozen=True)
class RemoveProperty:
    """Delete one property; absent keys are left alone."""

    key: str

    def __post_init__(self) -> None:
        _require_str(self.key, "Property key")


CatalogChange = Union[SetComment, SetProperty, RemoveProperty]


def apply_change(catalog: Catalog, change: CatalogChange) -> Catalog:
    """Return a new catalog with one change applied."""
    if isinstance(change, SetComment):
        return replace(catalog, comment=change.comment)
    elif isinstance(change, SetProperty):
        props = dict(catalog.properties)
        props[change.key] = change.value
        return replace(catalog, properties=props)
    elif isinstance(change, RemoveProperty):
        if change.key not in catalog.properties:
            return catalog
        props = dict(catalog.properties)
        del props[change.key]
        return replace(catalog, properties=props)
    raise InvalidArgumentError(f"Unknown catalog change type: {type(change).__name__}")


def apply_changes(catalog: Catalog, changes: Iterable[CatalogChange]) -> Catalog:
    """Apply changes left to right; later changes win on the same key."""
    for change in changes:
        catalog = apply_change(catalog, change)
    return catalog
