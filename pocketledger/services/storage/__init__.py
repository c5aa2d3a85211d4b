"""
Storage Services Package

Provides the abstract interfaces and concrete implementations for
ledger persistence. JSON files are the default backend; an in-memory
store is available for tests.
"""

from pocketledger.services.storage.interface import (
    BlobStore,
    LedgerStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from pocketledger.services.storage.memory import InMemoryBlobStore
from pocketledger.services.storage.json_files import JsonFileBlobStore
from pocketledger.services.storage.gateway import PersistenceGateway, create_gateway

__all__ = [
    # Interfaces
    "BlobStore",
    "LedgerStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "PersistenceGateway",
    "create_gateway",
]
