"""Process exit codes for the metacat CLI, one per error kind."""

from __future__ import annotations

from metacat.errors import ErrorKind, MetacatError

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
NOT_FOUND = 4
ALREADY_EXISTS = 5
CONFLICT = 6
UNAVAILABLE = 7

_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: USAGE_ERROR,
    ErrorKind.NAMESPACE_NOT_FOUND: NOT_FOUND,
    ErrorKind.CATALOG_NOT_FOUND: NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: ALREADY_EXISTS,
    ErrorKind.CONCURRENT_MODIFICATION: CONFLICT,
    ErrorKind.UNAVAILABLE: UNAVAILABLE,
    ErrorKind.INTERNAL: GENERAL_ERROR,
}


def for_error(err: BaseException) -> int:
    if isinstance(err, MetacatError):
        return _BY_KIND[err.kind]
    return GENERAL_ERROR
