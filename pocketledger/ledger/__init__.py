"""Ledger core: balances, recurrence, streak, budgets and the engine that owns them."""

from pocketledger.ledger.balances import balance_effect, recompute_balances
from pocketledger.ledger.budgets import BudgetAggregator
from pocketledger.ledger.dates import (
    get_month_range,
    get_week_range,
    get_week_start_option,
    get_year_range,
    rotate_week_days,
)
from pocketledger.ledger.engine import InvalidTransactionError, LedgerEngine, LedgerError
from pocketledger.ledger.recurrence import RecurrenceResult, expand_recurring
from pocketledger.ledger.seed import SeedData, generate_seed
from pocketledger.ledger.streak import StreakTracker

__all__ = [
    "BudgetAggregator",
    "InvalidTransactionError",
    "LedgerEngine",
    "LedgerError",
    "RecurrenceResult",
    "SeedData",
    "StreakTracker",
    "balance_effect",
    "expand_recurring",
    "generate_seed",
    "get_month_range",
    "get_week_range",
    "get_week_start_option",
    "get_year_range",
    "recompute_balances",
    "rotate_week_days",
]
