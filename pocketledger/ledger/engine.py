"""
Ledger Engine

The single owner of ledger state. Every mutation:
1. Updates the in-memory collections
2. Keeps cached account balances equal to the sum of transaction effects
3. Writes the touched collections through to storage before returning

CRITICAL INVARIANT: after any operation completes, for every account,
`current_balance == sum(balance_effect(tx, account))` over the live
transactions. Use `verify_balances()` to check it.

If a storage write fails, the in-memory state stays authoritative and
`StorageWriteError` is raised. Call `flush()` to retry the writes.

Referential integrity is permissive: deleting an account or category
leaves referencing transactions in place, and reads treat the missing
record as absent or uncategorized.
"""

import random
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from pocketledger.config import LedgerSettings, get_settings
from pocketledger.ledger.balances import (
    ZERO,
    apply_deltas,
    find_drift,
    net_deltas,
)
from pocketledger.ledger.budgets import BudgetAggregator
from pocketledger.ledger.dates import get_month_range
from pocketledger.ledger.recurrence import expand_recurring, sort_newest_first
from pocketledger.ledger.seed import generate_seed
from pocketledger.ledger.streak import StreakTracker
from pocketledger.log import get_logger
from pocketledger.models.ledger import (
    Account,
    AccountType,
    AppSettings,
    Budget,
    Category,
    CategoryType,
    Transaction,
    TransactionType,
    TransferTransaction,
    UserStreak,
    parse_transaction,
)
from pocketledger.models.reports import (
    BalanceDrift,
    BudgetStatus,
    DashboardSummary,
    LedgerSnapshot,
    ValidationResult,
)
from pocketledger.services.storage import LedgerStorageInterface, StorageWriteError
from pocketledger.validation import TransactionValidator


# Collections, in the order they are written
TRANSACTIONS = "transactions"
ACCOUNTS = "accounts"
CATEGORIES = "categories"
BUDGETS = "budgets"
SETTINGS = "settings"
STREAK = "streak"

# Default preference currency; swapped for the demo currency when seeding
DEFAULT_CURRENCY_SYMBOL = AppSettings().currency_symbol


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidTransactionError(LedgerError):
    """A transaction references records the ledger cannot resolve."""
    
    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(i.message for i in result.issues if i.severity == "error")
        super().__init__(f"Invalid transaction {result.transaction_id}: {messages}")


class LedgerEngine:
    """
    In-memory ledger state with write-through persistence.
    
    Construct with a storage backend, then call `boot()` once before use.
    """
    
    def __init__(
        self,
        storage: LedgerStorageInterface,
        settings: Optional[LedgerSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
        validator: Optional[TransactionValidator] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            storage: Persistence backend
            settings: Engine settings; read from the environment if omitted
            clock: Returns the current local time; injected for tests
            validator: Reference checker; a default one is used when
                       `settings.validate_transactions` is on
            rng: Randomness for demo data
        """
        self._storage = storage
        self._config = settings or get_settings().ledger
        self._clock = clock
        self._validator = validator or (
            TransactionValidator() if self._config.validate_transactions else None
        )
        self._rng = rng
        self._logger = get_logger(__name__)
        
        self._accounts: list[Account] = []
        self._transactions: list[Transaction] = []
        self._categories: list[Category] = []
        self._budgets: list[Budget] = []
        self._settings = AppSettings()
        self._streak = StreakTracker(UserStreak())
    
    # =========================================================================
    # STATE ACCESS
    # =========================================================================
    
    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts)
    
    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)
    
    @property
    def categories(self) -> list[Category]:
        return list(self._categories)
    
    @property
    def budgets(self) -> list[Budget]:
        return list(self._budgets)
    
    @property
    def settings(self) -> AppSettings:
        return self._settings
    
    @property
    def streak(self) -> UserStreak:
        return self._streak.state
    
    def now(self) -> datetime:
        return self._clock()
    
    def get_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self._accounts if a.id == account_id), None)
    
    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._categories if c.id == category_id), None)
    
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._transactions if t.id == transaction_id), None)
    
    def child_categories(self, parent_id: str) -> list[Category]:
        """Direct children of a category (callers cascade deletes with this)."""
        return [c for c in self._categories if c.parent_category_id == parent_id]
    
    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            accounts=self.accounts,
            transactions=self.transactions,
            categories=self.categories,
            budgets=self.budgets,
            settings=self._settings,
            streak=self.streak,
        )
    
    # =========================================================================
    # PERSISTENCE
    # =========================================================================
    
    def _save(self, *collections: str) -> None:
        """
        Write collections through to storage.
        
        Every collection is attempted even if an earlier one fails; the
        first failure is re-raised afterwards.
        """
        writers = {
            TRANSACTIONS: lambda: self._storage.save_transactions(self._transactions),
            ACCOUNTS: lambda: self._storage.save_accounts(self._accounts),
            CATEGORIES: lambda: self._storage.save_categories(self._categories),
            BUDGETS: lambda: self._storage.save_budgets(self._budgets),
            SETTINGS: lambda: self._storage.save_settings(self._settings),
            STREAK: lambda: self._storage.save_streak(self._streak.state),
        }
        failure: Optional[StorageWriteError] = None
        for name in collections:
            try:
                writers[name]()
            except StorageWriteError as e:
                self._logger.error("ledger_save_failed", collection=name, error=str(e))
                failure = failure or e
        if failure is not None:
            raise failure
    
    def flush(self) -> None:
        """Rewrite every collection from memory (e.g. after a failed write)."""
        self._save(TRANSACTIONS, ACCOUNTS, CATEGORIES, BUDGETS, SETTINGS, STREAK)
    
    # =========================================================================
    # BOOT
    # =========================================================================
    
    def boot(self) -> LedgerSnapshot:
        """
        Load state, seed if empty, materialize recurring backlog, check streak.
        
        Returns the initial snapshot for rendering.
        """
        self._accounts = self._storage.get_accounts()
        self._transactions = self._storage.get_transactions()
        self._categories = self._storage.get_categories()
        self._budgets = self._storage.get_budgets()
        self._settings = self._storage.get_settings()
        self._streak = StreakTracker(self._storage.get_streak())
        
        now = self.now()
        
        if not self._transactions and self._config.seed_on_empty:
            self._seed_empty_ledger(now)
        
        expansion = expand_recurring(
            self._transactions,
            self._accounts,
            now,
            max_instances=self._config.recurrence_max_instances,
        )
        if expansion.changed:
            self._transactions = expansion.transactions
            self._accounts = expansion.accounts
            self._save(TRANSACTIONS, ACCOUNTS)
        
        if self._streak.integrity_check(now.date()):
            self._save(STREAK)
        
        self._logger.info(
            "ledger_booted",
            accounts=len(self._accounts),
            transactions=len(self._transactions),
            recurring_generated=len(expansion.new_transactions),
            streak=self._streak.state.current_count,
        )
        return self.snapshot()
    
    def _seed_empty_ledger(self, now: datetime) -> None:
        seed = generate_seed(now, rng=self._rng, currency=self._config.seed_currency)
        self._accounts = seed.accounts
        self._transactions = seed.transactions
        self._budgets = seed.budgets
        self._save(ACCOUNTS, TRANSACTIONS, BUDGETS)
        
        if self._settings.currency_symbol == DEFAULT_CURRENCY_SYMBOL:
            self._settings = self._settings.model_copy(
                update={"currency_symbol": self._config.seed_currency_symbol}
            )
            self._save(SETTINGS)
        
        self._logger.info("ledger_seeded", transactions=len(seed.transactions))
    
    # =========================================================================
    # TRANSACTIONS
    # =========================================================================
    
    def _check(self, tx: Transaction) -> None:
        if self._validator is None:
            return
        result = self._validator.validate(tx, self._accounts, self._categories)
        for issue in result.warnings:
            self._logger.warning(
                "transaction_validation_warning",
                transaction_id=tx.id,
                field=issue.field,
                issue_type=issue.issue_type,
                message=issue.message,
            )
        if result.has_errors:
            raise InvalidTransactionError(result)
    
    def _record_streak(self, tx: Transaction) -> bool:
        """Advance the streak for `tx`; returns True if it changed."""
        return self._streak.record(tx.date, self.now().date())
    
    def add_transaction(self, tx: Transaction) -> bool:
        """
        Log a new transaction.
        
        The transaction is placed at the head of the collection and its
        balance effect applied once.
        
        Returns:
            True if this is the first transaction logged for today, the
            signal for the streak reward
        
        Raises:
            InvalidTransactionError: If its id is already in the ledger or it
                references an unknown account
        """
        duplicate = TransactionValidator.check_new_id(tx, self._transactions)
        if duplicate.has_errors:
            raise InvalidTransactionError(duplicate)
        self._check(tx)
        
        reward = self._streak.is_reward_due(tx.date, self.now().date())
        streak_changed = self._record_streak(tx)
        
        self._transactions = [tx] + self._transactions
        self._accounts = apply_deltas(self._accounts, net_deltas(applied=[tx]))
        
        self._logger.info(
            "transaction_added",
            transaction_id=tx.id,
            type=tx.type,
            amount=str(tx.amount),
            account_id=tx.account_id,
            streak=self._streak.state.current_count,
        )
        
        if streak_changed:
            self._save(STREAK, TRANSACTIONS, ACCOUNTS)
        else:
            self._save(TRANSACTIONS, ACCOUNTS)
        return reward
    
    def update_transaction(self, tx: Transaction) -> bool:
        """
        Replace a transaction, moving balances by the net difference.
        
        The old effect is reversed and the new one applied in a single
        pass, then the collection is re-sorted newest first.
        
        Returns:
            False (and changes nothing) if no transaction has this id
        """
        old = self.get_transaction(tx.id)
        if old is None:
            return False
        
        self._check(tx)
        streak_changed = self._record_streak(tx)
        
        self._accounts = apply_deltas(
            self._accounts,
            net_deltas(applied=[tx], reversed_=[old]),
        )
        self._transactions = sort_newest_first(
            [tx if t.id == tx.id else t for t in self._transactions]
        )
        
        self._logger.info(
            "transaction_updated",
            transaction_id=tx.id,
            old_amount=str(old.amount),
            new_amount=str(tx.amount),
            type=tx.type,
        )
        
        if streak_changed:
            self._save(STREAK, TRANSACTIONS, ACCOUNTS)
        else:
            self._save(TRANSACTIONS, ACCOUNTS)
        return True
    
    def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove a transaction and undo its balance effect.
        
        The streak is left alone: a day stays logged once it was logged.
        
        Returns:
            False if no transaction has this id
        """
        old = self.get_transaction(transaction_id)
        if old is None:
            return False
        
        self._accounts = apply_deltas(self._accounts, net_deltas(reversed_=[old]))
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        
        self._logger.info(
            "transaction_deleted",
            transaction_id=transaction_id,
            type=old.type,
            amount=str(old.amount),
        )
        self._save(TRANSACTIONS, ACCOUNTS)
        return True
    
    # =========================================================================
    # ACCOUNTS
    # =========================================================================
    
    def add_account(self, account: Account) -> Account:
        """
        Add an account.
        
        A non-zero starting balance is recorded as an "Opening Balance"
        transaction so the balance stays derivable from transactions.
        
        Returns:
            The stored account
        """
        opening = account.current_balance
        stored = account.model_copy(update={"current_balance": ZERO})
        self._accounts = self._accounts + [stored]
        self._logger.info("account_added", account_id=stored.id, type=stored.type)
        
        if opening == ZERO:
            self._save(ACCOUNTS)
            return stored
        
        tx = self._opening_transaction(stored, opening)
        self._transactions = sort_newest_first([tx] + self._transactions)
        self._accounts = apply_deltas(self._accounts, net_deltas(applied=[tx]))
        self._save(TRANSACTIONS, ACCOUNTS)
        return self.get_account(stored.id)
    
    def _opening_transaction(self, account: Account, opening: Decimal) -> Transaction:
        kind = CategoryType.INCOME if opening > ZERO else CategoryType.EXPENSE
        category = next((c for c in self._categories if c.type == kind), None)
        return parse_transaction({
            "type": kind.value,
            "amount": abs(opening),
            "currency": account.currency,
            "date": self.now(),
            "account_id": account.id,
            "category_id": category.id if category else kind.value,
            "notes": "Opening Balance",
        })
    
    def update_account(self, account: Account) -> bool:
        """
        Edit an account's details.
        
        The cached balance is kept; balances only move through transactions.
        """
        existing = self.get_account(account.id)
        if existing is None:
            return False
        
        updated = account.model_copy(update={"current_balance": existing.current_balance})
        self._accounts = [updated if a.id == account.id else a for a in self._accounts]
        self._logger.info("account_updated", account_id=account.id)
        self._save(ACCOUNTS)
        return True
    
    def delete_account(self, account_id: str) -> bool:
        """Remove an account. Its transactions are left in place."""
        if self.get_account(account_id) is None:
            return False
        
        self._accounts = [a for a in self._accounts if a.id != account_id]
        orphaned = sum(
            1 for t in self._transactions
            if t.account_id == account_id
            or (isinstance(t, TransferTransaction) and t.to_account_id == account_id)
        )
        self._logger.info("account_deleted", account_id=account_id, orphaned_transactions=orphaned)
        self._save(ACCOUNTS)
        return True
    
    # =========================================================================
    # BUDGETS & CATEGORIES
    # =========================================================================
    
    def add_budget(self, budget: Budget) -> None:
        """Add a budget, replacing any existing budget for the same category."""
        replaced = False
        budgets = []
        for existing in self._budgets:
            if existing.category_id == budget.category_id and not replaced:
                budgets.append(budget)
                replaced = True
            else:
                budgets.append(existing)
        if not replaced:
            budgets.append(budget)
        
        self._budgets = budgets
        self._logger.info(
            "budget_saved",
            budget_id=budget.id,
            category_id=budget.category_id,
            limit=str(budget.limit_amount),
            replaced=replaced,
        )
        self._save(BUDGETS)
    
    def add_category(self, category: Category) -> None:
        self._categories = self._categories + [category]
        self._logger.info("category_added", category_id=category.id)
        self._save(CATEGORIES)
    
    def update_category(self, category: Category) -> bool:
        if self.get_category(category.id) is None:
            return False
        self._categories = [category if c.id == category.id else c for c in self._categories]
        self._logger.info("category_updated", category_id=category.id)
        self._save(CATEGORIES)
        return True
    
    def delete_category(self, category_id: str) -> bool:
        """
        Remove one category.
        
        Children are NOT removed here; callers that want a cascade delete
        each of `child_categories(category_id)` themselves.
        """
        if self.get_category(category_id) is None:
            return False
        self._categories = [c for c in self._categories if c.id != category_id]
        self._logger.info("category_deleted", category_id=category_id)
        self._save(CATEGORIES)
        return True
    
    # =========================================================================
    # SETTINGS & RESET
    # =========================================================================
    
    def update_settings(self, changes: dict[str, Any]) -> AppSettings:
        """
        Merge preference changes over the current settings.
        
        Keys may be field names (`monthly_start_date`) or stored names
        (`monthlyStartDate`).
        """
        aliases = {
            info.alias: name
            for name, info in AppSettings.model_fields.items()
            if info.alias
        }
        merged = self._settings.model_dump()
        merged.update({aliases.get(key, key): value for key, value in changes.items()})
        self._settings = AppSettings.model_validate(merged)
        self._logger.info("settings_updated", fields=sorted(changes))
        self._save(SETTINGS)
        return self._settings
    
    def reset_data(self) -> LedgerSnapshot:
        """
        Replace everything with fresh demo data.
        
        The streak is zeroed and the currency symbol switched to the
        demo currency.
        """
        seed = generate_seed(self.now(), rng=self._rng, currency=self._config.seed_currency)
        self._accounts = seed.accounts
        self._transactions = seed.transactions
        self._categories = seed.categories
        self._budgets = seed.budgets
        self._streak = StreakTracker(UserStreak())
        self._settings = self._settings.model_copy(
            update={"currency_symbol": self._config.seed_currency_symbol}
        )
        
        self._logger.info("ledger_reset", transactions=len(self._transactions))
        self.flush()
        return self.snapshot()
    
    # =========================================================================
    # READ-ONLY SUMMARIES
    # =========================================================================
    
    def verify_balances(self) -> list[BalanceDrift]:
        """Accounts whose cached balance disagrees with the live transactions."""
        return find_drift(self._accounts, self._transactions)
    
    def budget_aggregator(self) -> BudgetAggregator:
        return BudgetAggregator(self._transactions, self._categories)
    
    def budget_statuses(self, reference: Optional[datetime] = None) -> list[BudgetStatus]:
        return self.budget_aggregator().statuses(
            self._budgets,
            reference or self.now(),
            self._settings.monthly_start_date,
        )
    
    def is_credit_transfer(self, tx: Transaction) -> bool:
        """Transfers into a credit account count as spending in summaries."""
        if not isinstance(tx, TransferTransaction):
            return False
        destination = self.get_account(tx.to_account_id)
        return destination is not None and destination.type == AccountType.CREDIT
    
    def period_totals(self, transactions: list[Transaction]) -> tuple[Decimal, Decimal]:
        """(income, expense) of `transactions`, with credit-card transfers as expense."""
        income = expense = ZERO
        for tx in transactions:
            if tx.type == TransactionType.INCOME:
                income += tx.amount
            elif tx.type == TransactionType.EXPENSE or self.is_credit_transfer(tx):
                expense += tx.amount
        return income, expense
    
    def dashboard_summary(self, reference: Optional[datetime] = None) -> DashboardSummary:
        period = get_month_range(reference or self.now(), self._settings.monthly_start_date)
        in_period = [t for t in self._transactions if period.contains(t.date)]
        income, expense = self.period_totals(in_period)
        
        lifetime = ZERO
        for tx in self._transactions:
            if tx.type == TransactionType.INCOME:
                lifetime += tx.amount
            elif tx.type == TransactionType.EXPENSE:
                lifetime -= tx.amount
        
        return DashboardSummary(
            period=period,
            income=income,
            expense=expense,
            net=income - expense,
            lifetime_savings=lifetime,
        )
