"""
Assistant Query Surface

DESIGN DECISION: The chat assistant never sees raw ledger data.
It calls the tools below, which compute answers DETERMINISTICALLY from the
engine's current state, and phrases a reply from what they return.

Each call is synchronous and atomic from the caller's point of view.
Results are plain JSON-compatible dicts (amounts as floats) because they
are handed straight to the language model.

Month offsets count back from now: 0 is the current budget month, -1 the
previous one, and so on. The window honours the user's month start day.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from pydantic import ValidationError

from pocketledger.ledger.dates import (
    days_in_range,
    get_month_range,
    period_label,
    shift_months,
)
from pocketledger.ledger.engine import InvalidTransactionError, LedgerEngine
from pocketledger.log import get_logger
from pocketledger.models.defaults import TRANSFER_CATEGORY_ID
from pocketledger.models.ledger import (
    Account,
    Category,
    DateRange,
    Transaction,
    TransactionType,
    parse_transaction,
)


UNCATEGORIZED = "Uncategorized"
UNSPECIFIED_MERCHANT = "Unspecified"


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


def _money(value: Decimal) -> float:
    return float(value)


def _find_by_name(items: list, needle: str):
    """First item whose name contains `needle`, case-insensitively."""
    needle = needle.lower()
    return next((item for item in items if needle in item.name.lower()), None)


class LedgerQueryExecutor:
    """
    Executes assistant tool calls against a ledger engine.
    
    GUARANTEES:
    - Only returns figures computed from the ledger
    - Never invents or estimates
    - Missing categories show as "Uncategorized" rather than failing
    """
    
    def __init__(self, engine: LedgerEngine, breakdown_limit: int = 5, search_limit: int = 10):
        self._engine = engine
        self._breakdown_limit = breakdown_limit
        self._search_limit = search_limit
        self._logger = get_logger(__name__)
        
        self._tools: dict[str, Callable[[dict], dict]] = {
            "getFinancialSummary": lambda args: self.get_financial_summary(
                month_offset=args.get("monthOffset", 0),
            ),
            "getCategoryBreakdown": lambda args: self.get_category_breakdown(
                month_offset=args.get("monthOffset", 0),
                type=args.get("type") or "expense",
            ),
            "getMerchantBreakdown": lambda args: self.get_merchant_breakdown(
                month_offset=args.get("monthOffset", 0),
            ),
            "getMonthlyTrend": lambda args: self.get_monthly_trend(
                month_offset=args.get("monthOffset", 0),
            ),
            "searchTransactions": lambda args: self.search_transactions(
                query=args.get("query", ""),
                min_amount=args.get("minAmount"),
                max_amount=args.get("maxAmount"),
                month_offset=args.get("monthOffset"),
            ),
            "addTransaction": lambda args: self.add_transaction(
                type=args.get("type") or "expense",
                amount=args.get("amount"),
                category_name=args.get("categoryName"),
                account_name=args.get("accountName"),
                to_account_name=args.get("toAccountName"),
                notes=args.get("notes"),
                date=args.get("date"),
            ),
        }
    
    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)
    
    def execute(self, name: str, args: Optional[dict[str, Any]] = None) -> dict:
        """
        Run one tool call by its assistant-facing name.
        
        Raises:
            QueryExecutionError: If the tool name is unknown
        """
        handler = self._tools.get(name)
        if handler is None:
            raise QueryExecutionError(f"Unknown tool: {name}")
        
        result = handler(args or {})
        self._logger.info("query_executed", tool=name)
        return result
    
    # =========================================================================
    # HELPERS
    # =========================================================================
    
    def _resolve_period(self, month_offset: Optional[float]) -> tuple[DateRange, str]:
        start_day = self._engine.settings.monthly_start_date
        target = shift_months(self._engine.now(), int(month_offset or 0))
        period = get_month_range(target, start_day)
        return period, period_label(period, start_day)
    
    def _in_period(self, period: DateRange) -> list[Transaction]:
        return [t for t in self._engine.transactions if period.contains(t.date)]
    
    def _category_name(self, category_id: str) -> Optional[str]:
        category = self._engine.get_category(category_id)
        return category.name if category else None
    
    def _top(self, totals: dict[str, Decimal], key: str) -> list[dict]:
        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [
            {key: name, "amount": _money(amount)}
            for name, amount in ranked[: self._breakdown_limit]
        ]
    
    # =========================================================================
    # READ TOOLS
    # =========================================================================
    
    def get_financial_summary(self, month_offset: float = 0) -> dict:
        """Income, expense, net and transaction count for one budget month."""
        period, label = self._resolve_period(month_offset)
        relevant = self._in_period(period)
        income, expense = self._engine.period_totals(relevant)
        
        return {
            "period": label,
            "income": _money(income),
            "expense": _money(expense),
            "net": _money(income - expense),
            "transactionCount": len(relevant),
        }
    
    def get_category_breakdown(self, month_offset: float = 0, type: str = "expense") -> dict:
        """Top categories by total amount for income or expense."""
        period, label = self._resolve_period(month_offset)
        
        totals: dict[str, Decimal] = defaultdict(Decimal)
        for tx in self._in_period(period):
            if tx.type == type:
                totals[self._category_name(tx.category_id) or UNCATEGORIZED] += tx.amount
        
        return {"period": label, "breakdown": self._top(totals, "category")}
    
    def get_merchant_breakdown(self, month_offset: float = 0) -> dict:
        """Top merchants by spending, using the notes field as the merchant."""
        period, label = self._resolve_period(month_offset)
        
        totals: dict[str, Decimal] = defaultdict(Decimal)
        for tx in self._in_period(period):
            if tx.type == TransactionType.EXPENSE:
                totals[tx.notes or UNSPECIFIED_MERCHANT] += tx.amount
        
        return {"period": label, "breakdown": self._top(totals, "merchant")}
    
    def get_monthly_trend(self, month_offset: float = 0) -> dict:
        """Expense total for every day of one budget month."""
        period, label = self._resolve_period(month_offset)
        
        per_day: dict[date, Decimal] = defaultdict(Decimal)
        for tx in self._in_period(period):
            if tx.type == TransactionType.EXPENSE:
                per_day[tx.date.date()] += tx.amount
        
        trend = [
            {"date": day.isoformat(), "amount": _money(per_day.get(day, Decimal("0")))}
            for day in days_in_range(period)
        ]
        return {"period": label, "trend": trend}
    
    def search_transactions(
        self,
        query: str,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        month_offset: Optional[float] = None,
    ) -> dict:
        """
        Find transactions whose category name or notes contain `query`.
        
        Searches all time unless `month_offset` is given.
        """
        needle = (query or "").lower()
        pool = self._engine.transactions
        if month_offset is not None:
            period, _ = self._resolve_period(month_offset)
            pool = [t for t in pool if period.contains(t.date)]
        
        try:
            low = Decimal(str(min_amount)) if min_amount is not None else None
            high = Decimal(str(max_amount)) if max_amount is not None else None
        except InvalidOperation:
            self._logger.warning(
                "search_bounds_rejected",
                min_amount=str(min_amount),
                max_amount=str(max_amount),
            )
            return {"status": "error", "message": "Amount bounds must be numbers"}
        
        matches = []
        for tx in pool:
            category = self._category_name(tx.category_id)
            haystacks = ((category or "").lower(), (tx.notes or "").lower())
            if not any(needle in text for text in haystacks):
                continue
            if low is not None and tx.amount < low:
                continue
            if high is not None and tx.amount > high:
                continue
            matches.append({
                "date": tx.date.date().isoformat(),
                "amount": _money(tx.amount),
                "type": tx.type,
                "category": category,
                "notes": tx.notes,
            })
            if len(matches) >= self._search_limit:
                break
        
        return {"count": len(matches), "transactions": matches}
    
    # =========================================================================
    # WRITE TOOL
    # =========================================================================
    
    def _resolve_category(self, type: str, category_name: Optional[str]) -> Optional[Category]:
        categories = self._engine.categories
        if category_name:
            match = _find_by_name(categories, category_name)
            if match is not None:
                return match
        if type == TransactionType.TRANSFER:
            transfer = self._engine.get_category(TRANSFER_CATEGORY_ID)
            if transfer is not None:
                return transfer
        fallback = next((c for c in categories if c.type == type), None)
        return fallback or (categories[0] if categories else None)
    
    def _resolve_date(self, value: Optional[str]) -> datetime:
        now = self._engine.now()
        if not value:
            return now
        parsed = datetime.fromisoformat(value)
        if len(value) <= 10:
            # Date only: keep the current time of day
            return datetime.combine(parsed.date(), now.time())
        return parsed
    
    def add_transaction(
        self,
        type: str,
        amount: Any,
        category_name: Optional[str] = None,
        account_name: Optional[str] = None,
        to_account_name: Optional[str] = None,
        notes: Optional[str] = None,
        date: Optional[str] = None,
    ) -> dict:
        """
        Log a transaction described by the assistant.
        
        Accounts and categories are matched by case-insensitive substring.
        An unmatched account falls back to the first account, an unmatched
        category to the first category of the same type.
        """
        accounts: list[Account] = self._engine.accounts
        if not accounts:
            return {"status": "error", "message": "No accounts exist yet"}
        
        account = _find_by_name(accounts, account_name or "") or accounts[0]
        to_account = _find_by_name(accounts, to_account_name) if to_account_name else None
        category = self._resolve_category(type, category_name)
        if category is None:
            return {"status": "error", "message": "No categories exist yet"}
        
        record = {
            "type": type,
            "amount": amount,
            "currency": account.currency,
            "account_id": account.id,
            "category_id": category.id,
            "notes": notes or ("Income" if type == TransactionType.INCOME else "AI Entry"),
            "is_recurring": False,
        }
        if to_account is not None:
            record["to_account_id"] = to_account.id
        
        try:
            record["date"] = self._resolve_date(date)
            tx = parse_transaction(record)
            self._engine.add_transaction(tx)
        except (ValueError, InvalidOperation, ValidationError, InvalidTransactionError) as e:
            self._logger.warning("assistant_transaction_rejected", error=str(e))
            return {"status": "error", "message": f"Could not add transaction: {e}"}
        
        symbol = self._engine.settings.currency_symbol
        return {
            "status": "success",
            "message": f"Added {symbol}{tx.amount} to {category.name}",
        }
