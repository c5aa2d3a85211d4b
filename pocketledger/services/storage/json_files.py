"""
JSON File Storage Implementation

DESIGN DECISION: Each collection lives in its own `<key>.json` file under
the configured data directory:
1. One blob per collection, overwritten in full on every save
2. Files are human readable and easy to back up
3. No database setup required

TRADEOFFS:
- Not suitable for large histories (every save rewrites the collection)
- No transactions across collections (see interface notes)

Writes go to a temporary file first and are moved into place, so a
crash never leaves a half-written collection behind.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocketledger.config import StorageSettings
from pocketledger.log import get_logger
from pocketledger.services.storage.interface import (
    BlobStore,
    StorageReadError,
    StorageWriteError,
)


class JsonFileBlobStore(BlobStore):
    """
    File-per-key blob store.
    
    Handles directory creation and retries transient OS errors on write.
    """
    
    def __init__(
        self,
        data_dir: Path,
        write_attempts: int = 3,
    ):
        self._data_dir = Path(data_dir)
        self._write_attempts = write_attempts
        self._logger = get_logger(__name__)
    
    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JsonFileBlobStore":
        return cls(settings.data_dir, write_attempts=settings.write_attempts)
    
    @property
    def data_dir(self) -> Path:
        return self._data_dir
    
    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"
    
    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e
    
    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write_atomic(path, value)
        except (OSError, RetryError) as e:
            self._logger.error(
                "storage_write_failed",
                key=key,
                path=str(path),
                attempts=self._write_attempts,
                error=str(e),
            )
            raise StorageWriteError(f"Could not write {path}: {e}") from e
    
    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageWriteError(f"Could not delete {path}: {e}") from e
    
    def _write_atomic(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.",
            suffix=".tmp",
            dir=path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
