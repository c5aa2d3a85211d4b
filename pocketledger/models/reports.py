"""
Read Models

Records returned by queries and validation. None of these are persisted;
they are computed from the ledger state on demand.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from pocketledger.models.ledger import (
    Account,
    AppSettings,
    Budget,
    Category,
    DateRange,
    Transaction,
    UserStreak,
)


class BudgetStatus(BaseModel):
    """
    Spending against one budget for one resolved window.
    
    `percentage` is clamped to 100 for display; `remaining` is not clamped
    and goes negative when the budget is overspent.
    """
    
    budget: Budget
    category: Category
    period: DateRange
    spent: Decimal
    remaining: Decimal
    percentage: float = Field(ge=0.0, le=100.0)
    is_over: bool


class DashboardSummary(BaseModel):
    """Headline figures for the current budget month."""
    
    period: DateRange
    income: Decimal
    expense: Decimal
    net: Decimal
    lifetime_savings: Decimal = Field(
        description="All-time income minus all-time expense"
    )


class BalanceDrift(BaseModel):
    """An account whose cached balance disagrees with its transactions."""
    
    account_id: str
    cached: Decimal
    expected: Decimal
    
    @property
    def difference(self) -> Decimal:
        return self.cached - self.expected


class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'unknown_reference', 'type_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of checking a transaction against the current ledger."""
    
    transaction_id: str
    issues: list[ValidationIssue] = Field(default_factory=list)
    
    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)
    
    @property
    def is_valid(self) -> bool:
        return not self.has_errors
    
    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


class LedgerSnapshot(BaseModel):
    """Everything a UI needs to render, as published by the engine."""
    
    accounts: list[Account]
    transactions: list[Transaction]
    categories: list[Category]
    budgets: list[Budget]
    settings: AppSettings
    streak: UserStreak
