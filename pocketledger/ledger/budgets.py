"""
Budget roll-ups.

Spending for a budget is the sum of expense transactions in the budget's
category or any of its direct children, within the resolved window.
Grandchildren are not rolled up. Income and transfers never count.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pocketledger.ledger.balances import ZERO
from pocketledger.ledger.dates import get_month_range, get_year_range
from pocketledger.models.ledger import (
    Budget,
    BudgetPeriod,
    Category,
    DateRange,
    Transaction,
    TransactionType,
)
from pocketledger.models.reports import BudgetStatus


class BudgetAggregator:
    """Read-only budget queries over a transaction and category snapshot."""
    
    def __init__(self, transactions: list[Transaction], categories: list[Category]):
        self._transactions = transactions
        self._categories = categories
    
    def rollup_ids(self, category_id: str) -> set[str]:
        """The category itself plus its direct children."""
        children = {c.id for c in self._categories if c.parent_category_id == category_id}
        return {category_id} | children
    
    def calculate_spent(self, category_id: str, period: DateRange) -> Decimal:
        targets = self.rollup_ids(category_id)
        return sum(
            (
                tx.amount
                for tx in self._transactions
                if tx.type == TransactionType.EXPENSE
                and tx.category_id in targets
                and period.contains(tx.date)
            ),
            ZERO,
        )
    
    @staticmethod
    def period_for(budget: Budget, reference: datetime, start_day: int) -> DateRange:
        if budget.period == BudgetPeriod.YEARLY:
            return get_year_range(reference)
        return get_month_range(reference, start_day)
    
    def budget_status(
        self,
        budget: Budget,
        reference: datetime,
        start_day: int = 1,
    ) -> Optional[BudgetStatus]:
        """
        Spending against `budget` for the window containing `reference`.
        
        Returns None when the budget's category no longer exists.
        """
        category = next((c for c in self._categories if c.id == budget.category_id), None)
        if category is None:
            return None
        
        period = self.period_for(budget, reference, start_day)
        spent = self.calculate_spent(budget.category_id, period)
        percentage = min(float(spent / budget.limit_amount * 100), 100.0)
        
        return BudgetStatus(
            budget=budget,
            category=category,
            period=period,
            spent=spent,
            remaining=budget.limit_amount - spent,
            percentage=percentage,
            is_over=spent > budget.limit_amount,
        )
    
    def statuses(
        self,
        budgets: list[Budget],
        reference: datetime,
        start_day: int = 1,
    ) -> list[BudgetStatus]:
        """Status of every budget whose category still exists."""
        results = []
        for budget in budgets:
            status = self.budget_status(budget, reference, start_day)
            if status is not None:
                results.append(status)
        return results
