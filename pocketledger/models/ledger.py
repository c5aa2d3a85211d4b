"""
Core Data Models for PocketLedger

These models define the strict schemas for every record the ledger owns.
They are designed to:
1. Make illegal states unrepresentable (a transfer always has a destination)
2. Keep money in fixed-point Decimal, never float
3. Round-trip through the JSON blob store unchanged

DESIGN DECISION: Transactions are a tagged union discriminated on `type`.
Only `TransferTransaction` carries `to_account_id`, and it is mandatory there.
"""

import time
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)


CENT = Decimal("0.01")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# Fixed-point money: always two decimal places
Money = Annotated[Decimal, AfterValidator(_to_cents)]
PositiveMoney = Annotated[Decimal, Field(gt=0), AfterValidator(_to_cents)]


def new_id() -> str:
    """Generate a record id."""
    return str(uuid4())


def now_millis() -> int:
    """Current time as epoch milliseconds (the `created_at` format)."""
    return int(time.time() * 1000)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Supported account kinds."""
    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"
    SAVINGS = "savings"


class CategoryType(str, Enum):
    """Categories are either income or expense buckets."""
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, Enum):
    """
    Transaction kinds.
    
    The type decides the direction of the balance effect;
    `amount` itself is always positive.
    """
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class BudgetPeriod(str, Enum):
    """Budget window length."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurrenceRule(str, Enum):
    """How often a recurring template repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# =============================================================================
# ACCOUNTS & CATEGORIES
# =============================================================================

class Account(BaseModel):
    """
    A money container.
    
    CRITICAL: `current_balance` is a derived cache. It equals the sum of the
    balance effects of every live transaction touching this account and is
    only ever changed by the ledger engine.
    
    For credit accounts a negative balance is debt owed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")
    
    id: str = Field(default_factory=new_id)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    type: AccountType
    currency: str = Field(
        default="USD",
        description="Stored for display only; amounts are never converted"
    )
    current_balance: Money = Field(
        default=Decimal("0.00"),
        description="Cached sum of transaction effects"
    )
    color: str = ""
    credit_limit: Optional[Money] = Field(
        default=None,
        description="Spending limit for credit accounts"
    )

    @field_validator("credit_limit")
    @classmethod
    def validate_credit_limit(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Credit limit cannot be negative")
        return v


class Category(BaseModel):
    """
    Transaction category.
    
    Categories form a two-level tree: a parent and its direct children.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")
    
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    icon: str = ""
    color: str = ""
    parent_category_id: Optional[str] = None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class _TransactionBase(BaseModel):
    """Fields shared by every transaction variant."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")
    
    id: str = Field(default_factory=new_id)
    amount: PositiveMoney = Field(
        ...,
        description="Always positive; direction comes from `type`"
    )
    currency: str = "USD"
    date: datetime = Field(
        ...,
        description="When the transaction happened (naive local time)"
    )
    account_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    payee: Optional[str] = None
    notes: Optional[str] = None
    created_at: int = Field(
        default_factory=now_millis,
        description="Epoch milliseconds when the record was created"
    )
    
    # Recurrence
    is_recurring: bool = Field(
        default=False,
        description="True for a template that generates instances"
    )
    recurrence_rule: Optional[RecurrenceRule] = None
    parent_id: Optional[str] = Field(
        default=None,
        description="Template id for generated instances"
    )
    
    @field_validator("date")
    @classmethod
    def to_local_time(cls, v: datetime) -> datetime:
        """Store timestamps as naive local time so calendar-day checks agree."""
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v
    
    @property
    def is_template(self) -> bool:
        return self.is_recurring and self.recurrence_rule is not None


class IncomeTransaction(_TransactionBase):
    type: Literal["income"] = "income"


class ExpenseTransaction(_TransactionBase):
    type: Literal["expense"] = "expense"


class TransferTransaction(_TransactionBase):
    """Moves money from `account_id` to `to_account_id`."""
    
    type: Literal["transfer"] = "transfer"
    to_account_id: str = Field(..., min_length=1)
    
    @model_validator(mode="after")
    def validate_accounts(self) -> "TransferTransaction":
        if self.to_account_id == self.account_id:
            raise ValueError("Transfer source and destination must differ")
        return self


Transaction = Annotated[
    Union[IncomeTransaction, ExpenseTransaction, TransferTransaction],
    Field(discriminator="type"),
]

TRANSACTION_ADAPTER = TypeAdapter(Transaction)
TRANSACTION_LIST_ADAPTER = TypeAdapter(list[Transaction])


def parse_transaction(data: dict) -> Transaction:
    """Build the right transaction variant from a plain record."""
    return TRANSACTION_ADAPTER.validate_python(data)


# =============================================================================
# BUDGETS, STREAK, PREFERENCES
# =============================================================================

class Budget(BaseModel):
    """
    Spending limit for a category.
    
    At most one budget exists per category; adding another replaces it.
    """
    model_config = ConfigDict(extra="ignore")
    
    id: str = Field(default_factory=new_id)
    category_id: str = Field(..., min_length=1)
    limit_amount: PositiveMoney
    period: BudgetPeriod = BudgetPeriod.MONTHLY


class UserStreak(BaseModel):
    """Consecutive calendar days with at least one logged transaction."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    
    current_count: int = Field(default=0, ge=0, alias="currentCount")
    longest_count: int = Field(default=0, ge=0, alias="longestCount")
    last_log_date: Optional[date] = Field(default=None, alias="lastLogDate")
    
    @model_validator(mode="after")
    def validate_counts(self) -> "UserStreak":
        if self.longest_count < self.current_count:
            raise ValueError("Longest streak cannot be shorter than the current streak")
        return self


class AppSettings(BaseModel):
    """
    User display preferences.
    
    Only `monthly_start_date` and `weekly_start_day` matter to the core:
    they anchor every custom month/week window.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    
    user_name: str = Field(default="User", alias="userName")
    user_avatar: Optional[str] = Field(default=None, alias="userAvatar")
    monthly_start_date: int = Field(
        default=1,
        ge=1,
        le=28,
        alias="monthlyStartDate",
        description="Day of month on which a budget month starts"
    )
    weekly_start_day: str = Field(default="Sunday", alias="weeklyStartDay")
    theme_color: str = Field(default="Premium Purple", alias="themeColor")
    theme_mode: ThemeMode = Field(default=ThemeMode.LIGHT, alias="themeMode")
    currency_symbol: str = Field(default="₹", alias="currencySymbol")


class DateRange(BaseModel):
    """Inclusive window between two local timestamps."""
    
    start: datetime
    end: datetime
    
    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end
