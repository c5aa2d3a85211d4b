"""
Data Models Package

All records owned by the ledger, and the read models computed from them.
"""

from pocketledger.models.ledger import (
    Account,
    AccountType,
    AppSettings,
    Budget,
    BudgetPeriod,
    Category,
    CategoryType,
    DateRange,
    ExpenseTransaction,
    IncomeTransaction,
    RecurrenceRule,
    ThemeMode,
    Transaction,
    TransactionType,
    TransferTransaction,
    UserStreak,
    new_id,
    parse_transaction,
)
from pocketledger.models.reports import (
    BalanceDrift,
    BudgetStatus,
    DashboardSummary,
    LedgerSnapshot,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger records
    "Account",
    "AccountType",
    "AppSettings",
    "Budget",
    "BudgetPeriod",
    "Category",
    "CategoryType",
    "DateRange",
    "ExpenseTransaction",
    "IncomeTransaction",
    "RecurrenceRule",
    "ThemeMode",
    "Transaction",
    "TransactionType",
    "TransferTransaction",
    "UserStreak",
    "new_id",
    "parse_transaction",
    # Read models
    "BalanceDrift",
    "BudgetStatus",
    "DashboardSummary",
    "LedgerSnapshot",
    "ValidationIssue",
    "ValidationResult",
]
