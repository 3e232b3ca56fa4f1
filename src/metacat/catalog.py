"""Catalog entity and its persisted record form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from metacat.identifiers import NameIdentifier, Namespace

INITIAL_REVISION = 1


@dataclass(frozen=True)
class AuditInfo:
    """Who created and last modified a catalog, and when."""

    creator: str
    create_time: datetime
    last_modifier: str | None = None
    last_modified_time: datetime | None = None

    def modified(self, principal: str, when: datetime) -> AuditInfo:
        return replace(self, last_modifier=principal, last_modified_time=when)

    def to_dict(self) -> dict[str, Any]:
        return {
            "creator": self.creator,
            "create_time": self.create_time.isoformat(),
            "last_modifier": self.last_modifier,
            "last_modified_time": (
                self.last_modified_time.isoformat() if self.last_modified_time else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AuditInfo:
        modified = data.get("last_modified_time")
        return cls(
            creator=data["creator"],
            create_time=datetime.fromisoformat(data["create_time"]),
            last_modifier=data.get("last_modifier"),
            last_modified_time=datetime.fromisoformat(modified) if modified else None,
        )


@dataclass(frozen=True)
class Catalog:
    """Read-only snapshot of a registered catalog.

    ``revision`` is the optimistic-concurrency marker: 1 on create, bumped by
    every committed alter.
    """

    ident: NameIdentifier
    type: str
    audit: AuditInfo
    comment: str | None = None
    properties: Mapping[str, str] = field(default_factory=dict)
    revision: int = INITIAL_REVISION

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def name(self) -> str:
        return self.ident.name

    @property
    def namespace(self) -> Namespace:
        return self.ident.namespace

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for storage backends."""
        return {
            "namespace": list(self.ident.namespace.levels),
            "name": self.ident.name,
            "type": self.type,
            "comment": self.comment,
            "properties": dict(self.properties),
            "audit": self.audit.to_dict(),
            "revision": self.revision,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Catalog:
        ident = NameIdentifier(Namespace(tuple(record["namespace"])), record["name"])
        return cls(
            ident=ident,
            type=record["type"],
            comment=record.get("comment"),
            properties=record.get("properties") or {},
            audit=AuditInfo.from_dict(record["audit"]),
            revision=int(record["revision"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Caller-facing representation used by the CLI."""
        return {
            "name": self.ident.name,
            "metalake": str(self.ident.namespace),
            "type": self.type,
            "comment": self.comment,
            "properties": dict(self.properties),
            "audit": self.audit.to_dict(),
            "revision": self.revision,
        }
