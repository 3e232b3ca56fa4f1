"""Tests for configuration loading, errors and logging setup."""

from __future__ import annotations

import pytest
import structlog

from metacat import (
    CatalogAlreadyExistsError,
    CatalogNotFoundError,
    ConcurrentModificationError,
    InternalError,
    InvalidArgumentError,
    MetacatConfig,
    NameIdentifier,
    Namespace,
    NamespaceNotFoundError,
    UnavailableError,
    config_from_env,
    load_config,
)
from metacat.errors import ErrorKind, http_status_for
from metacat.logs import configure_logging


class TestLoadConfig:
    def test_defaults(self):
        cfg = MetacatConfig()
        assert cfg.storage_uri == "sqlite:///metacat.db"
        assert cfg.metalakes == []

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "metacat.yaml"
        path.write_text(
            "storage_uri: memory://\nmetalakes: [lake, other]\nprincipal: svc\nlog_json: true\n"
        )
        cfg = load_config(str(path))
        assert cfg.storage_uri == "memory://"
        assert cfg.metalakes == ["lake", "other"]
        assert cfg.principal == "svc"
        assert cfg.log_json is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == MetacatConfig()

    @pytest.mark.parametrize(
        "text", ["bogus_key: 1\n", "- a\n- b\n", "metalakes: lake\n", "key: [unclosed\n"]
    )
    def test_invalid_files(self, tmp_path, text):
        path = tmp_path / "bad.yaml"
        path.write_text(text)
        with pytest.raises(InvalidArgumentError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidArgumentError, match="Cannot read config file"):
            load_config(str(tmp_path / "nope.yaml"))


class TestConfigFromEnv:
    def test_overlay(self, monkeypatch):
        monkeypatch.setenv("METACAT_STORAGE_URI", "memory://")
        monkeypatch.setenv("METACAT_METALAKES", "lake, other,,")
        monkeypatch.setenv("METACAT_PRINCIPAL", "svc")
        monkeypatch.setenv("METACAT_S3_ENDPOINT", "http://minio:9000")
        cfg = config_from_env(MetacatConfig(log_level="INFO"))
        assert cfg.storage_uri == "memory://"
        assert cfg.metalakes == ["lake", "other"]
        assert cfg.principal == "svc"
        assert cfg.s3_endpoint_url == "http://minio:9000"
        assert cfg.log_level == "INFO"

    def test_no_env_returns_base(self, monkeypatch):
        for var in (
            "METACAT_STORAGE_URI",
            "METACAT_METALAKES",
            "METACAT_PRINCIPAL",
            "METACAT_LOG_LEVEL",
            "METACAT_S3_REGION",
            "METACAT_S3_ENDPOINT_URL",
            "METACAT_S3_ENDPOINT",
        ):
            monkeypatch.delenv(var, raising=False)
        base = MetacatConfig(principal="me")
        assert config_from_env(base) is base


class TestErrorMapping:
    @pytest.mark.parametrize(
        "err, kind, status",
        [
            (InvalidArgumentError("bad"), ErrorKind.INVALID_ARGUMENT, 400),
            (NamespaceNotFoundError(Namespace.of("lake")), ErrorKind.NAMESPACE_NOT_FOUND, 404),
            (
                CatalogNotFoundError(NameIdentifier.of("lake", "c")),
                ErrorKind.CATALOG_NOT_FOUND,
                404,
            ),
            (
                CatalogAlreadyExistsError(NameIdentifier.of("lake", "c")),
                ErrorKind.ALREADY_EXISTS,
                409,
            ),
            (
                ConcurrentModificationError(NameIdentifier.of("lake", "c"), 3),
                ErrorKind.CONCURRENT_MODIFICATION,
                409,
            ),
            (UnavailableError("get", "timeout"), ErrorKind.UNAVAILABLE, 503),
            (InternalError("load"), ErrorKind.INTERNAL, 500),
        ],
    )
    def test_kind_and_status(self, err, kind, status):
        assert err.kind is kind
        assert http_status_for(err) == status

    def test_foreign_exception_is_500(self):
        assert http_status_for(KeyError("x")) == 500

    def test_messages_name_the_resource(self):
        assert str(CatalogNotFoundError(NameIdentifier.of("lake", "c"))) == (
            "Catalog lake.c does not exist"
        )
        assert str(NamespaceNotFoundError(Namespace.of("lake"))) == "Metalake lake does not exist"


class TestLogging:
    def test_configure_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")

    def test_json_renderer_writes_to_stderr(self, capsys):
        configure_logging("INFO", json=True)
        structlog.get_logger("t").info("Created catalog", ident="lake.c")
        err = capsys.readouterr().err
        assert '"event": "Created catalog"' in err
        assert '"ident": "lake.c"' in err

    def test_level_filtering(self, capsys):
        configure_logging("WARNING")
        log = structlog.get_logger("t")
        log.info("hidden")
        log.warning("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err
