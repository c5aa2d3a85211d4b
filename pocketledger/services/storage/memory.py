"""In-memory blob store, used for tests and throwaway sessions."""

from typing import Optional

from pocketledger.services.storage.interface import BlobStore


class InMemoryBlobStore(BlobStore):
    """Dictionary-backed blob store. Nothing survives the process."""
    
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})
    
    def get(self, key: str) -> Optional[str]:
        return self._blobs.get(key)
    
    def set(self, key: str, value: str) -> None:
        self._blobs[key] = value
    
    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)
    
    def keys(self) -> list[str]:
        return sorted(self._blobs)
