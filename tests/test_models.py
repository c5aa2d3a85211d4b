"""Tests for the ledger's Pydantic models."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pocketledger.models.ledger import (
    Account,
    AccountType,
    AppSettings,
    Budget,
    BudgetPeriod,
    ExpenseTransaction,
    IncomeTransaction,
    TransactionType,
    TransferTransaction,
    UserStreak,
    parse_transaction,
)


class TestTransactionModels:
    """Tests for the tagged transaction union."""
    
    def test_parse_picks_variant_from_type(self):
        """Test that the `type` field selects the transaction class."""
        base = {"amount": 5, "account_id": "A", "category_id": "cat_1", "date": "2026-10-01T09:00:00"}
        assert isinstance(parse_transaction({**base, "type": "income"}), IncomeTransaction)
        assert isinstance(parse_transaction({**base, "type": "expense"}), ExpenseTransaction)
        transfer = parse_transaction({**base, "type": "transfer", "to_account_id": "B"})
        assert isinstance(transfer, TransferTransaction)
        assert transfer.type == TransactionType.TRANSFER
    
    def test_transfer_requires_destination(self):
        """Test that a transfer without to_account_id is rejected."""
        with pytest.raises(ValidationError):
            parse_transaction({
                "type": "transfer",
                "amount": 5,
                "account_id": "A",
                "category_id": "cat_transfer",
                "date": "2026-10-01T09:00:00",
            })
    
    def test_transfer_rejects_same_account(self):
        """Test that source and destination must differ."""
        with pytest.raises(ValidationError, match="must differ"):
            TransferTransaction(
                amount=Decimal("5"),
                account_id="A",
                to_account_id="A",
                category_id="cat_transfer",
                date=datetime(2026, 10, 1),
            )
    
    def test_amount_must_be_positive(self):
        """Test that zero and negative amounts are rejected."""
        for bad in ("0", "-10"):
            with pytest.raises(ValidationError):
                ExpenseTransaction(
                    amount=Decimal(bad),
                    account_id="A",
                    category_id="cat_1",
                    date=datetime(2026, 10, 1),
                )
    
    def test_amount_is_fixed_point(self):
        """Test that float input becomes a two-place Decimal."""
        tx = parse_transaction({
            "type": "expense",
            "amount": 12.5,
            "account_id": "A",
            "category_id": "cat_1",
            "date": "2026-10-01T09:00:00",
        })
        assert tx.amount == Decimal("12.50")
        assert tx.amount.as_tuple().exponent == -2
    
    def test_unknown_type_rejected(self):
        """Test that an unknown discriminator fails validation."""
        with pytest.raises(ValidationError):
            parse_transaction({
                "type": "refund",
                "amount": 5,
                "account_id": "A",
                "category_id": "cat_1",
                "date": "2026-10-01T09:00:00",
            })
    
    def test_aware_dates_become_naive_local(self):
        """Test that timezone-aware timestamps are stored as naive local time."""
        aware = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        tx = IncomeTransaction(
            amount=Decimal("1"),
            account_id="A",
            category_id="cat_5",
            date=aware,
        )
        assert tx.date.tzinfo is None
        assert tx.date == aware.astimezone().replace(tzinfo=None)
    
    def test_non_transfer_ignores_stray_destination(self):
        """Test that legacy payloads with to_account_id on an expense still load."""
        tx = parse_transaction({
            "type": "expense",
            "amount": 5,
            "account_id": "A",
            "to_account_id": None,
            "category_id": "cat_1",
            "date": "2026-10-01T09:00:00",
        })
        assert not hasattr(tx, "to_account_id")
    
    def test_template_flag(self):
        """Test that only recurring records with a rule are templates."""
        tx = IncomeTransaction(
            amount=Decimal("1"),
            account_id="A",
            category_id="cat_5",
            date=datetime(2026, 10, 1),
            is_recurring=True,
        )
        assert tx.is_template is False
        assert tx.model_copy(update={"recurrence_rule": "monthly"}).is_template is True


class TestAccountAndBudgetModels:
    """Tests for accounts and budgets."""
    
    def test_account_defaults(self):
        """Test a new account starts at zero."""
        account = Account(name="  Wallet  ", type=AccountType.CASH)
        assert account.name == "Wallet"
        assert account.current_balance == Decimal("0.00")
        assert account.id
    
    def test_credit_limit_cannot_be_negative(self):
        """Test credit limit validation."""
        with pytest.raises(ValidationError, match="Credit limit"):
            Account(name="Card", type=AccountType.CREDIT, credit_limit=Decimal("-1"))
    
    def test_budget_limit_must_be_positive(self):
        """Test that a budget needs a positive limit."""
        with pytest.raises(ValidationError):
            Budget(category_id="cat_1", limit_amount=Decimal("0"))
    
    def test_budget_default_period(self):
        budget = Budget(category_id="cat_1", limit_amount=Decimal("100"))
        assert budget.period == BudgetPeriod.MONTHLY


class TestStreakAndSettings:
    """Tests for the camelCase-stored records."""
    
    def test_streak_accepts_stored_names(self):
        """Test loading a streak payload as stored."""
        streak = UserStreak.model_validate(
            {"currentCount": 2, "longestCount": 5, "lastLogDate": "2026-10-17"}
        )
        assert streak.current_count == 2
        assert streak.last_log_date == date(2026, 10, 17)
    
    def test_streak_longest_never_below_current(self):
        """Test the longest >= current invariant."""
        with pytest.raises(ValidationError, match="Longest streak"):
            UserStreak(current_count=3, longest_count=1)
    
    def test_settings_month_start_bounds(self):
        """Test that the month start day is limited to 1-28."""
        with pytest.raises(ValidationError):
            AppSettings(monthly_start_date=29)
        assert AppSettings(monthlyStartDate=15).monthly_start_date == 15
    
    def test_settings_dump_uses_stored_names(self):
        """Test serialization keeps the stored key names."""
        dumped = AppSettings().model_dump(by_alias=True)
        assert dumped["monthlyStartDate"] == 1
        assert dumped["weeklyStartDay"] == "Sunday"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
