"""S3 catalog store using conditional writes for atomicity.

Each catalog is one JSON object at ``<prefix>/catalogs/<metalake>/<name>.json``,
with every segment percent-encoded so ``/`` inside a name cannot alias a key.
Inserts use ``If-None-Match: *``; updates and deletes use ``If-Match`` on the
ETag that was read together with the revision being checked.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import quote

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError

from metacat.catalog import Catalog
from metacat.config import MetacatConfig
from metacat.errors import UnavailableError
from metacat.identifiers import NameIdentifier, Namespace


class _PreconditionFailed(Exception):
    pass


def _error_code(err: Exception) -> str:
    if isinstance(err, ClientError):
        return str(err.response.get("Error", {}).get("Code", ""))
    return ""


def _is_not_found(err: Exception) -> bool:
    return _error_code(err) in {"NoSuchKey", "404", "NotFound"}


def _is_precondition_failed(err: Exception) -> bool:
    return _error_code(err) in {"PreconditionFailed", "412", "ConditionalRequestConflict"}


class S3CatalogStore:
    """S3-backed catalog store."""

    def __init__(
        self,
        *,
        bucket: str,
        prefix: str = "",
        config: MetacatConfig | None = None,
        client: Any | None = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        cfg = config or MetacatConfig()
        if client is None:
            session = boto3.Session(region_name=cfg.s3_region)
            client = session.client(
                "s3",
                region_name=cfg.s3_region,
                endpoint_url=cfg.s3_endpoint_url,
                config=BotoConfig(
                    connect_timeout=cfg.s3_request_timeout_s,
                    read_timeout=cfg.s3_request_timeout_s,
                    retries={"max_attempts": 5, "mode": "standard"},
                ),
            )
        self._s3 = client

    # --- Key/object helpers ---

    def _k(self, rel_path: str) -> str:
        return f"{self.prefix}/{rel_path}" if self.prefix else rel_path

    def _namespace_prefix(self, namespace: Namespace) -> str:
        levels = "/".join(quote(level, safe="") for level in namespace.levels)
        return self._k(f"catalogs/{levels}/")

    def _catalog_key(self, ident: NameIdentifier) -> str:
        return f"{self._namespace_prefix(ident.namespace)}{quote(ident.name, safe='')}.json"

    @contextmanager
    def _backend(self, operation: str) -> Iterator[None]:
        try:
            yield
        except ParamValidationError as e:
            raise UnavailableError(
                operation, "S3 endpoint does not support conditional write preconditions"
            ) from e
        except (ClientError, BotoCoreError) as e:
            raise UnavailableError(operation, str(e)) from e

    def _get_json(self, key: str) -> tuple[dict[str, Any] | None, str | None]:
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return None, None
            raise
        body = resp["Body"].read()
        etag = resp.get("ETag")
        return json.loads(body.decode("utf-8")), etag if isinstance(etag, str) else None

    def _put_json(
        self,
        *,
        key: str,
        obj: dict[str, Any],
        if_none_match: str | None = None,
        if_match: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8"),
            "ContentType": "application/json",
        }
        if if_none_match is not None:
            kwargs["IfNoneMatch"] = if_none_match
        if if_match is not None:
            kwargs["IfMatch"] = if_match
        try:
            self._s3.put_object(**kwargs)
        except ClientError as e:
            if _is_precondition_failed(e):
                raise _PreconditionFailed() from e
            raise

    # --- Store contract ---

    def get(self, ident: NameIdentifier) -> Catalog | None:
        with self._backend("get"):
            record, _etag = self._get_json(self._catalog_key(ident))
        return Catalog.from_record(record) if record is not None else None

    def insert_if_absent(self, ident: NameIdentifier, catalog: Catalog) -> bool:
        with self._backend("insert_if_absent"):
            try:
                self._put_json(
                    key=self._catalog_key(ident), obj=catalog.to_record(), if_none_match="*"
                )
            except _PreconditionFailed:
                return False
        return True

    def list(self, namespace: Namespace) -> list[Catalog]:
        catalogs: list[Catalog] = []
        prefix = self._namespace_prefix(namespace)
        with self._backend("list"):
            paginator = self._s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    # Direct children only; deeper keys belong to longer namespaces.
                    if not key.endswith(".json") or "/" in key[len(prefix) :]:
                        continue
                    record, _etag = self._get_json(key)
                    # Dropped between listing and reading.
                    if record is not None:
                        catalogs.append(Catalog.from_record(record))
        return sorted(catalogs, key=lambda c: c.name)

    def compare_and_swap(
        self, ident: NameIdentifier, expected_revision: int, catalog: Catalog
    ) -> bool:
        key = self._catalog_key(ident)
        with self._backend("compare_and_swap"):
            record, etag = self._get_json(key)
            if record is None or etag is None:
                return False
            if int(record["revision"]) != expected_revision:
                return False
            try:
                self._put_json(key=key, obj=catalog.to_record(), if_match=etag)
            except _PreconditionFailed:
                return False
        return True

    def compare_and_delete(
        self, ident: NameIdentifier, expected_revision: int | None = None
    ) -> bool:
        key = self._catalog_key(ident)
        with self._backend("compare_and_delete"):
            while True:
                record, etag = self._get_json(key)
                if record is None or etag is None:
                    return False
                if expected_revision is not None and int(record["revision"]) != expected_revision:
                    return False
                try:
                    self._s3.delete_object(Bucket=self.bucket, Key=key, IfMatch=etag)
                except ClientError as e:
                    if _is_not_found(e):
                        return False
                    # Rewritten since our read: re-read and check again.
                    if _is_precondition_failed(e):
                        continue
                    raise
                return True

    def close(self) -> None:
        pass
