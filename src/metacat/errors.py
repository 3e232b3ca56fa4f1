"""Structured error types for metacat."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of failures surfaced by the registry."""

    INVALID_ARGUMENT = "invalid_argument"
    NAMESPACE_NOT_FOUND = "namespace_not_found"
    CATALOG_NOT_FOUND = "catalog_not_found"
    ALREADY_EXISTS = "already_exists"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"


class MetacatError(Exception):
    """Base error for all metacat errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    http_status: int = 500


class InvalidArgumentError(MetacatError, ValueError):
    """Raised for malformed identifiers, empty required fields or undecodable changes."""

    kind = ErrorKind.INVALID_ARGUMENT
    http_status = 400


class NamespaceNotFoundError(MetacatError):
    """Raised when the parent metalake of a namespace does not exist."""

    kind = ErrorKind.NAMESPACE_NOT_FOUND
    http_status = 404

    def __init__(self, namespace: object) -> None:
        self.namespace = namespace
        super().__init__(f"Metalake {namespace} does not exist")


class CatalogNotFoundError(MetacatError):
    """Raised when no catalog record exists at an identifier."""

    kind = ErrorKind.CATALOG_NOT_FOUND
    http_status = 404

    def __init__(self, ident: object) -> None:
        self.ident = ident
        super().__init__(f"Catalog {ident} does not exist")


class CatalogAlreadyExistsError(MetacatError):
    """Raised when creating a catalog at an identifier that is already taken."""

    kind = ErrorKind.ALREADY_EXISTS
    http_status = 409

    def __init__(self, ident: object) -> None:
        self.ident = ident
        super().__init__(f"Catalog {ident} already exists")


class ConcurrentModificationError(MetacatError):
    """Raised when an optimistic revision precondition fails on commit."""

    kind = ErrorKind.CONCURRENT_MODIFICATION
    http_status = 409

    def __init__(self, ident: object, expected_revision: int) -> None:
        self.ident = ident
        self.expected_revision = expected_revision
        super().__init__(
            f"Catalog {ident} was modified concurrently "
            f"(expected revision {expected_revision}); reload and retry"
        )


class UnavailableError(MetacatError):
    """Raised when a storage or directory collaborator cannot answer."""

    kind = ErrorKind.UNAVAILABLE
    http_status = 503

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Backend unavailable during {operation}: {detail}")


class InternalError(MetacatError):
    """Opaque wrapper for unexpected failures."""

    kind = ErrorKind.INTERNAL
    http_status = 500

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Internal error during {operation}")


def http_status_for(err: BaseException) -> int:
    """Map any exception to its transport status code."""
    if isinstance(err, MetacatError):
        return err.http_status
    return InternalError.http_status
