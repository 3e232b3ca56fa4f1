"""metacat: catalog registry for metalakes."""

__version__ = "0.1.0"

from metacat.catalog import AuditInfo, Catalog
from metacat.changes import (
    CatalogChange,
    RemoveProperty,
    SetComment,
    SetProperty,
    apply_change,
    apply_changes,
)
from metacat.config import MetacatConfig, config_from_env, load_config
from metacat.directory import StaticMetalakeDirectory
from metacat.errors import (
    CatalogAlreadyExistsError,
    CatalogNotFoundError,
    ConcurrentModificationError,
    ErrorKind,
    InternalError,
    InvalidArgumentError,
    MetacatError,
    NamespaceNotFoundError,
    UnavailableError,
)
from metacat.identifiers import NameIdentifier, Namespace
from metacat.ports import CatalogStoreProtocol, MetalakeDirectoryProtocol
from metacat.registry import CatalogRegistry
from metacat.storage import MemoryCatalogStore, SqliteCatalogStore, open_store

__all__ = [
    "__version__",
    "Namespace",
    "NameIdentifier",
    "Catalog",
    "AuditInfo",
    "CatalogChange",
    "SetComment",
    "SetProperty",
    "RemoveProperty",
    "apply_change",
    "apply_changes",
    "CatalogRegistry",
    "CatalogStoreProtocol",
    "MetalakeDirectoryProtocol",
    "StaticMetalakeDirectory",
    "MemoryCatalogStore",
    "SqliteCatalogStore",
    "open_store",
    "MetacatConfig",
    "load_config",
    "config_from_env",
    "MetacatError",
    "ErrorKind",
    "InvalidArgumentError",
    "NamespaceNotFoundError",
    "CatalogNotFoundError",
    "CatalogAlreadyExistsError",
    "ConcurrentModificationError",
    "UnavailableError",
    "InternalError",
]
