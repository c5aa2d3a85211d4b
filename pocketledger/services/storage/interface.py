"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists through two small interfaces:
1. `BlobStore` - a raw key-value store of text blobs (one key per collection)
2. `LedgerStorageInterface` - typed get/save per collection

This allows us to:
1. Swap the JSON files for another backend later
2. Use in-memory storage for testing
3. Keep the engine decoupled from serialization

Saves are full-collection overwrites. There is no merge and no
cross-collection transaction: a crash between two saves can leave
collections out of step with each other.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pocketledger.models.ledger import (
    Account,
    AppSettings,
    Budget,
    Category,
    Transaction,
    UserStreak,
)


class BlobStore(ABC):
    """Raw key-value storage of text blobs."""
    
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a blob.
        
        Returns:
            The stored text, or None if the key was never written
        """
        pass
    
    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite a blob.
        
        Raises:
            StorageWriteError: If the write fails
        """
        pass
    
    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a blob; missing keys are ignored."""
        pass


class LedgerStorageInterface(ABC):
    """
    Typed access to the ledger collections.
    
    Every getter returns a built-in default when nothing is stored.
    Every saver overwrites the whole collection.
    """
    
    @abstractmethod
    def get_transactions(self) -> list[Transaction]:
        pass
    
    @abstractmethod
    def save_transactions(self, transactions: list[Transaction]) -> None:
        pass
    
    @abstractmethod
    def get_accounts(self) -> list[Account]:
        pass
    
    @abstractmethod
    def save_accounts(self, accounts: list[Account]) -> None:
        pass
    
    @abstractmethod
    def get_categories(self) -> list[Category]:
        pass
    
    @abstractmethod
    def save_categories(self, categories: list[Category]) -> None:
        pass
    
    @abstractmethod
    def get_budgets(self) -> list[Budget]:
        pass
    
    @abstractmethod
    def save_budgets(self, budgets: list[Budget]) -> None:
        pass
    
    @abstractmethod
    def get_settings(self) -> AppSettings:
        """Stored preferences merged over the defaults."""
        pass
    
    @abstractmethod
    def save_settings(self, settings: AppSettings) -> None:
        pass
    
    @abstractmethod
    def get_streak(self) -> UserStreak:
        pass
    
    @abstractmethod
    def save_streak(self, streak: UserStreak) -> None:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """A stored blob could not be decoded."""
    pass


class StorageWriteError(StorageError):
    """A blob could not be written."""
    pass
