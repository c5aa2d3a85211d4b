"""
Shared fixtures.

Test strategy:
1. Unit tests for the pure helpers (dates, balances, streak, recurrence)
2. Engine tests against in-memory storage with a frozen clock
3. No real filesystem outside tmp_path, no wall-clock dependence
"""

from datetime import datetime
from decimal import Decimal

import pytest

from pocketledger.config import LedgerSettings
from pocketledger.ledger import LedgerEngine
from pocketledger.models.defaults import default_categories
from pocketledger.models.ledger import Account, AccountType, parse_transaction
from pocketledger.services.storage import InMemoryBlobStore, PersistenceGateway


NOW = datetime(2026, 10, 18, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings(seed_on_empty=False)


@pytest.fixture
def store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def gateway(store) -> PersistenceGateway:
    return PersistenceGateway(store)


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(id="A", name="Checking", type=AccountType.BANK),
        Account(id="B", name="Savings", type=AccountType.SAVINGS),
        Account(id="C", name="Amex Card", type=AccountType.CREDIT, credit_limit=Decimal("1000")),
    ]


@pytest.fixture
def engine(gateway, accounts, ledger_settings) -> LedgerEngine:
    gateway.save_accounts(accounts)
    gateway.save_categories(default_categories())
    engine = LedgerEngine(gateway, settings=ledger_settings, clock=lambda: NOW)
    engine.boot()
    return engine


@pytest.fixture
def make_tx():
    """Factory for transactions with sensible defaults."""
    
    def _make(
        type: str = "expense",
        amount="10",
        account_id: str = "A",
        to_account_id=None,
        category_id=None,
        date: datetime = NOW,
        **extra,
    ):
        if category_id is None:
            category_id = {"income": "cat_5", "transfer": "cat_transfer"}.get(type, "cat_1")
        record = {
            "type": type,
            "amount": Decimal(str(amount)),
            "account_id": account_id,
            "category_id": category_id,
            "date": date,
            **extra,
        }
        if to_account_id is not None:
            record["to_account_id"] = to_account_id
        return parse_transaction(record)
    
    return _make
