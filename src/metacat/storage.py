"""Catalog store backends and storage URI resolution."""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from metacat.catalog import Catalog
from metacat.config import MetacatConfig
from metacat.errors import InvalidArgumentError, UnavailableError
from metacat.identifiers import NameIdentifier, Namespace
from metacat.ports import CatalogStoreProtocol


@dataclass(frozen=True)
class StorageTarget:
    """Resolved storage target from a storage URI."""

    backend: str
    uri: str
    db_path: str | None = None
    bucket: str | None = None
    prefix: str | None = None


def parse_storage_target(storage_uri: str) -> StorageTarget:
    """Resolve ``memory://``, ``sqlite:///path`` and ``s3://bucket/prefix`` URIs."""
    parsed = urlparse(storage_uri)

    if parsed.scheme == "memory":
        return StorageTarget(backend="memory", uri=storage_uri)

    if parsed.scheme == "sqlite":
        sqlite_path = parsed.path
        if parsed.netloc:
            sqlite_path = f"{parsed.netloc}{sqlite_path}"
        elif sqlite_path.startswith("//"):
            # sqlite:////abs/path -> /abs/path
            sqlite_path = sqlite_path[1:]
        elif sqlite_path.startswith("/"):
            # sqlite:///rel/path -> rel/path
            sqlite_path = sqlite_path[1:]
        if sqlite_path in ("/:memory:", ":memory:"):
            sqlite_path = ":memory:"
        if not sqlite_path:
            raise InvalidArgumentError(f"Invalid sqlite URI: {storage_uri}")
        return StorageTarget(backend="sqlite", uri=storage_uri, db_path=sqlite_path)

    if parsed.scheme == "s3":
        bucket = parsed.netloc
        prefix = parsed.path.lstrip("/").rstrip("/")
        if not bucket:
            raise InvalidArgumentError(f"Invalid s3 URI: {storage_uri}")
        return StorageTarget(backend="s3", uri=storage_uri, bucket=bucket, prefix=prefix)

    raise InvalidArgumentError(
        f"Unsupported storage URI scheme '{parsed.scheme}' for '{storage_uri}'"
    )


class MemoryCatalogStore:
    """Process-local store. One lock makes every primitive atomic."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[NameIdentifier, Catalog] = {}

    def get(self, ident: NameIdentifier) -> Catalog | None:
        with self._lock:
            return self._records.get(ident)

    def insert_if_absent(self, ident: NameIdentifier, catalog: Catalog) -> bool:
        with self._lock:
            if ident in self._records:
                return False
            self._records[ident] = catalog
            return True

    def list(self, namespace: Namespace) -> list[Catalog]:
        with self._lock:
            return [c for i, c in self._records.items() if i.namespace == namespace]

    def compare_and_swap(
        self, ident: NameIdentifier, expected_revision: int, catalog: Catalog
    ) -> bool:
        with self._lock:
            current = self._records.get(ident)
            if current is None or current.revision != expected_revision:
                return False
            self._records[ident] = catalog
            return True

    def compare_and_delete(
        self, ident: NameIdentifier, expected_revision: int | None = None
    ) -> bool:
        with self._lock:
            current = self._records.get(ident)
            if current is None:
                return False
            if expected_revision is not None and current.revision != expected_revision:
                return False
            del self._records[ident]
            return True

    def close(self) -> None:
        pass


class SqliteCatalogStore:
    """SQLite-backed catalog store.

    Atomicity comes from the ``(namespace, name)`` primary key for inserts and
    from ``revision`` guards in UPDATE/DELETE statements.
    """

    def __init__(self, db_path: str, *, timeout_s: float = 5.0) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, timeout=timeout_s, check_same_thread=False)
            if db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._create_tables()
        except sqlite3.OperationalError as e:
            raise UnavailableError("open", f"Cannot open sqlite store '{db_path}': {e}") from e

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS catalogs (
                namespace TEXT NOT NULL,
                name TEXT NOT NULL,
                revision INTEGER NOT NULL,
                record_json TEXT NOT NULL,
                PRIMARY KEY (namespace, name)
            );
        """)
        self._conn.commit()

    @contextmanager
    def _tx(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.OperationalError as e:
                self._conn.rollback()
                raise UnavailableError(operation, str(e)) from e
            except BaseException:
                self._conn.rollback()
                raise

    @staticmethod
    def _encode(catalog: Catalog) -> str:
        return json.dumps(catalog.to_record(), sort_keys=True)

    @staticmethod
    def _decode(record_json: str) -> Catalog:
        record: dict[str, Any] = json.loads(record_json)
        return Catalog.from_record(record)

    def get(self, ident: NameIdentifier) -> Catalog | None:
        with self._tx("get") as conn:
            row = conn.execute(
                "SELECT record_json FROM catalogs WHERE namespace = ? AND name = ?",
                (str(ident.namespace), ident.name),
            ).fetchone()
        return self._decode(row[0]) if row else None

    def insert_if_absent(self, ident: NameIdentifier, catalog: Catalog) -> bool:
        try:
            with self._tx("insert_if_absent") as conn:
                conn.execute(
                    "INSERT INTO catalogs (namespace, name, revision, record_json) "
                    "VALUES (?, ?, ?, ?)",
                    (str(ident.namespace), ident.name, catalog.revision, self._encode(catalog)),
                )
        except sqlite3.IntegrityError:
            return False
        return True

    def list(self, namespace: Namespace) -> list[Catalog]:
        with self._tx("list") as conn:
            rows = conn.execute(
                "SELECT record_json FROM catalogs WHERE namespace = ? ORDER BY name",
                (str(namespace),),
            ).fetchall()
        return [self._decode(r[0]) for r in rows]

    def compare_and_swap(
        self, ident: NameIdentifier, expected_revision: int, catalog: Catalog
    ) -> bool:
        with self._tx("compare_and_swap") as conn:
            cursor = conn.execute(
                "UPDATE catalogs SET revision = ?, record_json = ? "
                "WHERE namespace = ? AND name = ? AND revision = ?",
                (
                    catalog.revision,
                    self._encode(catalog),
                    str(ident.namespace),
                    ident.name,
                    expected_revision,
                ),
            )
        return cursor.rowcount == 1

    def compare_and_delete(
        self, ident: NameIdentifier, expected_revision: int | None = None
    ) -> bool:
        sql = "DELETE FROM catalogs WHERE namespace = ? AND name = ?"
        params: list[Any] = [str(ident.namespace), ident.name]
        if expected_revision is not None:
            sql += " AND revision = ?"
            params.append(expected_revision)
        with self._tx("compare_and_delete") as conn:
            cursor = conn.execute(sql, params)
        return cursor.rowcount == 1

    def close(self) -> None:
        self._conn.close()


def open_store(
    storage_uri: str,
    *,
    config: MetacatConfig | None = None,
) -> CatalogStoreProtocol:
    """Open a catalog store for a storage URI."""
    cfg = config or MetacatConfig()
    target = parse_storage_target(storage_uri)
    if target.backend == "memory":
        return MemoryCatalogStore()
    if target.backend == "sqlite":
        assert target.db_path is not None
        return SqliteCatalogStore(target.db_path, timeout_s=cfg.sqlite_timeout_s)
    if target.backend == "s3":
        from metacat.storage_s3 import S3CatalogStore

        assert target.bucket is not None
        return S3CatalogStore(bucket=target.bucket, prefix=target.prefix or "", config=cfg)
    raise InvalidArgumentError(f"Unsupported backend '{target.backend}'")


__all__ = [
    "MemoryCatalogStore",
    "SqliteCatalogStore",
    "StorageTarget",
    "parse_storage_target",
    "open_store",
]
