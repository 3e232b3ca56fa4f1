"""Configuration for the metacat registry."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any

import yaml

from metacat.errors import InvalidArgumentError

DEFAULT_STORAGE_URI = "sqlite:///metacat.db"


@dataclass
class MetacatConfig:
    """Configuration for the registry, its stores and the CLI."""

    storage_uri: str = DEFAULT_STORAGE_URI
    metalakes: list[str] = field(default_factory=list)
    principal: str | None = None
    log_level: str = "ERROR"
    log_json: bool = False
    sqlite_timeout_s: float = 5.0
    s3_region: str | None = None
    s3_endpoint_url: str | None = None
    s3_request_timeout_s: float = 10.0


def load_config(path: str) -> MetacatConfig:
    """Read a YAML config file. Unknown keys are rejected."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise InvalidArgumentError(f"Cannot read config file '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise InvalidArgumentError(f"Invalid YAML in config file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Config file '{path}' must contain a mapping")

    known = {f.name for f in fields(MetacatConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown config keys in '{path}': {unknown}")

    metalakes = data.get("metalakes")
    if metalakes is not None and not isinstance(metalakes, list):
        raise InvalidArgumentError("Config key 'metalakes' must be a list")
    return MetacatConfig(**data)


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def config_from_env(base: MetacatConfig | None = None) -> MetacatConfig:
    """Overlay METACAT_* environment variables on a base config."""
    cfg = base or MetacatConfig()
    overrides: dict[str, Any] = {}

    if uri := os.getenv("METACAT_STORAGE_URI"):
        overrides["storage_uri"] = uri
    if metalakes := os.getenv("METACAT_METALAKES"):
        overrides["metalakes"] = _split_csv(metalakes)
    if principal := os.getenv("METACAT_PRINCIPAL"):
        overrides["principal"] = principal
    if level := os.getenv("METACAT_LOG_LEVEL"):
        overrides["log_level"] = level
    if region := os.getenv("METACAT_S3_REGION"):
        overrides["s3_region"] = region
    endpoint = os.getenv("METACAT_S3_ENDPOINT_URL") or os.getenv("METACAT_S3_ENDPOINT")
    if endpoint:
        overrides["s3_endpoint_url"] = endpoint

    return replace(cfg, **overrides) if overrides else cfg
