"""S3 backend integration tests (MinIO-compatible)."""

from __future__ import annotations

import os
import uuid

import boto3
import pytest

from metacat import (
    CatalogAlreadyExistsError,
    CatalogRegistry,
    MetacatConfig,
    NameIdentifier,
    Namespace,
    SetComment,
    StaticMetalakeDirectory,
    open_store,
)

pytestmark = pytest.mark.s3


@pytest.fixture
def s3_uri() -> tuple[str, MetacatConfig]:
    if os.getenv("METACAT_S3_TEST") != "1":
        pytest.skip("S3 integration tests disabled (set METACAT_S3_TEST=1)")

    endpoint = os.getenv("METACAT_S3_ENDPOINT", "http://127.0.0.1:9000")
    bucket = os.getenv("METACAT_S3_BUCKET", "metacat-test")
    region = os.getenv("METACAT_S3_REGION", "us-east-1")

    s3 = boto3.client("s3", endpoint_url=endpoint, region_name=region)
    existing = {b["Name"] for b in s3.list_buckets().get("Buckets", [])}
    if bucket not in existing:
        s3.create_bucket(Bucket=bucket)

    uri = f"s3://{bucket}/it/{uuid.uuid4().hex}"
    return uri, MetacatConfig(storage_uri=uri, s3_region=region, s3_endpoint_url=endpoint)


def test_lifecycle_against_live_s3(s3_uri):
    uri, cfg = s3_uri
    store = open_store(uri, config=cfg)
    registry = CatalogRegistry(store, StaticMetalakeDirectory(["lake"]))
    ident = NameIdentifier.of("lake", "hive")

    registry.create_catalog(ident, "relational", properties={"a": "1"})
    with pytest.raises(CatalogAlreadyExistsError):
        registry.create_catalog(ident, "relational")

    updated = registry.alter_catalog(ident, [SetComment("live")])
    assert updated.revision == 2
    assert [c.name for c in registry.list_catalogs(Namespace.of("lake"))] == ["hive"]
    assert registry.drop_catalog(ident) is True
    assert registry.drop_catalog(ident) is False
