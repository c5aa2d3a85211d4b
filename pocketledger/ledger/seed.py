"""
Demo data.

Used when storage holds no transactions and when the user resets the
ledger. The shape is fixed (four accounts, two months of bills and
salary, fifty discretionary purchases, a few very recent entries); only
the discretionary amounts and dates are random.

Balances are never hand-set: they are recomputed from the generated
transactions with the same rule the engine uses.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import NamedTuple, Optional

from pocketledger.ledger.balances import recompute_balances
from pocketledger.ledger.recurrence import sort_newest_first
from pocketledger.models.defaults import TRANSFER_CATEGORY_ID, default_categories
from pocketledger.models.ledger import (
    Account,
    AccountType,
    Budget,
    BudgetPeriod,
    Category,
    Transaction,
    TransactionType,
    new_id,
    parse_transaction,
)


HISTORY_DAYS = 60
RANDOM_EXPENSE_COUNT = 50

# Days ago on which each of the two monthly paychecks landed
PAYDAYS = (55, 25)


class ExpenseArchetype(NamedTuple):
    category_id: str
    notes: str
    min_amount: int
    max_amount: int
    account_id: str


EXPENSE_MIX = [
    ExpenseArchetype("cat_1", "Whole Foods Market", 80, 200, "acc_2"),
    ExpenseArchetype("cat_1", "Starbucks", 6, 15, "acc_2"),
    ExpenseArchetype("cat_1", "Local Diner", 30, 60, "acc_1"),
    ExpenseArchetype("cat_2", "Uber Ride", 15, 40, "acc_2"),
    ExpenseArchetype("cat_2", "Shell Gas Station", 40, 70, "acc_2"),
    ExpenseArchetype("cat_7", "Netflix Subscription", 15, 15, "acc_2"),
    ExpenseArchetype("cat_7", "Cinema Tickets", 30, 50, "acc_2"),
    ExpenseArchetype("cat_3", "Amazon Purchase", 20, 150, "acc_2"),
    ExpenseArchetype("cat_3", "Target Run", 50, 120, "acc_1"),
]


@dataclass
class SeedData:
    accounts: list[Account]
    transactions: list[Transaction]
    categories: list[Category]
    budgets: list[Budget]


def seed_accounts(currency: str = "USD") -> list[Account]:
    return [
        Account(id="acc_1", name="Chase Checking", type=AccountType.BANK, currency=currency, color="violet"),
        Account(
            id="acc_2",
            name="Amex Gold",
            type=AccountType.CREDIT,
            currency=currency,
            color="amber",
            credit_limit=Decimal("15000"),
        ),
        Account(id="acc_3", name="High Yield Savings", type=AccountType.SAVINGS, currency=currency, color="emerald"),
        Account(id="acc_4", name="Wallet Cash", type=AccountType.CASH, currency=currency, color="zinc"),
    ]


def seed_budgets() -> list[Budget]:
    return [
        Budget(id="bud_1", category_id="cat_1", limit_amount=Decimal("800"), period=BudgetPeriod.MONTHLY),
        Budget(id="bud_2", category_id="cat_3", limit_amount=Decimal("400"), period=BudgetPeriod.MONTHLY),
        Budget(id="bud_3", category_id="cat_2", limit_amount=Decimal("300"), period=BudgetPeriod.MONTHLY),
        Budget(id="bud_4", category_id="cat_7", limit_amount=Decimal("200"), period=BudgetPeriod.MONTHLY),
    ]


class _Builder:
    """Accumulates seed transactions dated relative to `now`."""
    
    def __init__(self, now: datetime, currency: str):
        self._now = now
        self._currency = currency
        self.transactions: list[Transaction] = []
    
    def add(
        self,
        days_ago: int,
        type_: TransactionType,
        amount,
        notes: str,
        category_id: str,
        account_id: str,
        to_account_id: Optional[str] = None,
    ) -> None:
        when = self._now - timedelta(days=days_ago)
        record = {
            "id": new_id(),
            "type": type_.value,
            "amount": Decimal(str(amount)),
            "currency": self._currency,
            "date": when,
            "account_id": account_id,
            "category_id": category_id,
            "notes": notes,
            "created_at": int(when.timestamp() * 1000),
        }
        if to_account_id is not None:
            record["to_account_id"] = to_account_id
        self.transactions.append(parse_transaction(record))


def generate_seed(
    now: datetime,
    rng: Optional[random.Random] = None,
    currency: str = "USD",
) -> SeedData:
    """
    Build a fresh demo ledger.
    
    Args:
        now: Reference time; every transaction is dated relative to it
        rng: Source of randomness, pass a seeded one for repeatable output
        currency: Currency code stamped on accounts and transactions
    """
    rng = rng or random.Random()
    builder = _Builder(now, currency)
    income, expense, transfer = TransactionType.INCOME, TransactionType.EXPENSE, TransactionType.TRANSFER
    
    # Opening balances
    builder.add(HISTORY_DAYS, income, 4500, "Opening Balance", "cat_5", "acc_1")
    builder.add(HISTORY_DAYS, income, 10000, "Opening Balance", "cat_5", "acc_3")
    builder.add(HISTORY_DAYS, income, 150, "Cash on hand", "cat_6", "acc_4")
    
    # Two months of salary, rent, internet and auto-savings
    for days in PAYDAYS:
        builder.add(days, income, 4200, "Salary Deposit", "cat_5", "acc_1")
        builder.add(days - 2, expense, 1800, "Monthly Rent", "cat_4", "acc_1")
        builder.add(days - 3, expense, 60, "Internet Bill", "cat_4", "acc_2")
        builder.add(days - 1, transfer, 500, "Monthly Savings", TRANSFER_CATEGORY_ID, "acc_1", "acc_3")
    
    # Discretionary spending
    for _ in range(RANDOM_EXPENSE_COUNT):
        days_ago = rng.randrange(HISTORY_DAYS)
        item = rng.choice(EXPENSE_MIX)
        amount = rng.randint(item.min_amount, item.max_amount)
        builder.add(days_ago, expense, amount, item.notes, item.category_id, item.account_id)
    
    # A few very recent entries
    builder.add(1, expense, "12.50", "Chipotle", "cat_1", "acc_2")
    builder.add(2, expense, "45.00", "Grocery Run", "cat_1", "acc_1")
    builder.add(3, income, "150.00", "Freelance Gig", "cat_6", "acc_1")
    
    transactions = sort_newest_first(builder.transactions)
    return SeedData(
        accounts=recompute_balances(seed_accounts(currency), transactions),
        transactions=transactions,
        categories=default_categories(),
        budgets=seed_budgets(),
    )
