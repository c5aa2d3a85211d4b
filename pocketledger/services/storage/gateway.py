"""
Persistence Gateway

Typed, per-collection access over any `BlobStore`. Collections are stored
as JSON under stable key names (`pl_transactions`, `pl_accounts`, ...)
so existing payloads keep loading.

Defaults when a key is empty:
- transactions, budgets: empty list
- accounts, categories: the built-in starter set
- settings, streak: default objects

Settings are merged field by field over the defaults, so payloads written
before a preference existed still load.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from pocketledger.config import StorageSettings, get_settings
from pocketledger.models.defaults import default_accounts, default_categories
from pocketledger.models.ledger import (
    TRANSACTION_LIST_ADAPTER,
    Account,
    AppSettings,
    Budget,
    Category,
    Transaction,
    UserStreak,
)
from pocketledger.services.storage.interface import (
    BlobStore,
    LedgerStorageInterface,
    StorageReadError,
)
from pocketledger.services.storage.json_files import JsonFileBlobStore
from pocketledger.services.storage.memory import InMemoryBlobStore


TRANSACTIONS_KEY = "transactions"
ACCOUNTS_KEY = "accounts"
CATEGORIES_KEY = "categories"
BUDGETS_KEY = "budgets"
SETTINGS_KEY = "settings"
STREAK_KEY = "streak"


class PersistenceGateway(LedgerStorageInterface):
    """
    JSON serialization of ledger collections onto a blob store.
    
    Each save is a full overwrite of one key.
    """
    
    def __init__(self, store: BlobStore, key_prefix: str = "pl_"):
        self._store = store
        self._prefix = key_prefix
    
    @property
    def store(self) -> BlobStore:
        return self._store
    
    def key_for(self, collection: str) -> str:
        return f"{self._prefix}{collection}"
    
    # -- raw helpers -------------------------------------------------------
    
    def _read(self, collection: str) -> Optional[Any]:
        key = self.key_for(collection)
        blob = self._store.get(key)
        if blob is None:
            return None
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Stored {key} is not valid JSON: {e}") from e
    
    def _write(self, collection: str, payload: Any) -> None:
        self._store.set(
            self.key_for(collection),
            json.dumps(payload, ensure_ascii=False),
        )
    
    def _load_models(self, collection: str, model: type[BaseModel], default: list) -> list:
        data = self._read(collection)
        if data is None:
            return default
        try:
            return [model.model_validate(item) for item in data]
        except (TypeError, ValidationError) as e:
            raise StorageReadError(f"Stored {collection} failed validation: {e}") from e
    
    @staticmethod
    def _dump_models(items: list[BaseModel]) -> list[dict]:
        return [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items]
    
    # -- transactions ------------------------------------------------------
    
    def get_transactions(self) -> list[Transaction]:
        data = self._read(TRANSACTIONS_KEY)
        if data is None:
            return []
        try:
            return TRANSACTION_LIST_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise StorageReadError(f"Stored transactions failed validation: {e}") from e
    
    def save_transactions(self, transactions: list[Transaction]) -> None:
        payload = TRANSACTION_LIST_ADAPTER.dump_python(
            transactions, mode="json", exclude_none=True
        )
        self._write(TRANSACTIONS_KEY, payload)
    
    # -- accounts / categories / budgets -----------------------------------
    
    def get_accounts(self) -> list[Account]:
        return self._load_models(ACCOUNTS_KEY, Account, default_accounts())
    
    def save_accounts(self, accounts: list[Account]) -> None:
        self._write(ACCOUNTS_KEY, self._dump_models(accounts))
    
    def get_categories(self) -> list[Category]:
        return self._load_models(CATEGORIES_KEY, Category, default_categories())
    
    def save_categories(self, categories: list[Category]) -> None:
        self._write(CATEGORIES_KEY, self._dump_models(categories))
    
    def get_budgets(self) -> list[Budget]:
        return self._load_models(BUDGETS_KEY, Budget, [])
    
    def save_budgets(self, budgets: list[Budget]) -> None:
        self._write(BUDGETS_KEY, self._dump_models(budgets))
    
    # -- settings / streak -------------------------------------------------
    
    def get_settings(self) -> AppSettings:
        data = self._read(SETTINGS_KEY)
        defaults = AppSettings().model_dump(mode="json", by_alias=True)
        if not isinstance(data, dict):
            data = {}
        try:
            return AppSettings.model_validate({**defaults, **data})
        except ValidationError as e:
            raise StorageReadError(f"Stored settings failed validation: {e}") from e
    
    def save_settings(self, settings: AppSettings) -> None:
        self._write(SETTINGS_KEY, settings.model_dump(mode="json", by_alias=True))
    
    def get_streak(self) -> UserStreak:
        data = self._read(STREAK_KEY)
        if data is None:
            return UserStreak()
        try:
            return UserStreak.model_validate(data)
        except ValidationError as e:
            raise StorageReadError(f"Stored streak failed validation: {e}") from e
    
    def save_streak(self, streak: UserStreak) -> None:
        self._write(STREAK_KEY, streak.model_dump(mode="json", by_alias=True))


def create_gateway(settings: Optional[StorageSettings] = None) -> PersistenceGateway:
    """
    Factory for the configured storage backend.
    
    Args:
        settings: Storage settings; read from the environment if omitted
    """
    settings = settings or get_settings().storage
    if settings.backend == "memory":
        store: BlobStore = InMemoryBlobStore()
    else:
        store = JsonFileBlobStore.from_settings(settings)
    return PersistenceGateway(store, key_prefix=settings.key_prefix)
