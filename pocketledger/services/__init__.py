"""Services package."""

from pocketledger.services.storage import (
    BlobStore,
    InMemoryBlobStore,
    JsonFileBlobStore,
    LedgerStorageInterface,
    PersistenceGateway,
    StorageError,
    StorageReadError,
    StorageWriteError,
    create_gateway,
)

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "LedgerStorageInterface",
    "PersistenceGateway",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "create_gateway",
]
