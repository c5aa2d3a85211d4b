"""Tests for recurring template materialization."""

from datetime import datetime
from decimal import Decimal

import pytest

from pocketledger.ledger.recurrence import (
    expand_recurring,
    materialize_template,
    next_occurrence,
)
from pocketledger.models.ledger import RecurrenceRule


@pytest.fixture
def monthly_rent(make_tx):
    """Monthly expense template dated three months before NOW."""
    return make_tx(
        "expense",
        "1200",
        category_id="cat_4",
        date=datetime(2026, 7, 18, 9, 0),
        id="tmpl_rent",
        is_recurring=True,
        recurrence_rule="monthly",
    )


class TestNextOccurrence:
    
    def test_steps(self):
        anchor = datetime(2026, 1, 31, 9, 0)
        assert next_occurrence(anchor, RecurrenceRule.DAILY) == datetime(2026, 2, 1, 9, 0)
        assert next_occurrence(anchor, RecurrenceRule.WEEKLY) == datetime(2026, 2, 7, 9, 0)
        assert next_occurrence(anchor, RecurrenceRule.MONTHLY) == datetime(2026, 2, 28, 9, 0)


class TestMaterializeTemplate:
    """Tests for a single template's backlog."""
    
    def test_generates_each_missed_month(self, monthly_rent, now):
        """Test a template three months old yields three instances."""
        instances = materialize_template(monthly_rent, [monthly_rent], now)
        assert [tx.date for tx in instances] == [
            datetime(2026, 8, 18, 9, 0),
            datetime(2026, 9, 18, 9, 0),
            datetime(2026, 10, 18, 9, 0),
        ]
    
    def test_instance_fields(self, monthly_rent, now):
        instance = materialize_template(monthly_rent, [monthly_rent], now)[0]
        assert instance.id != monthly_rent.id
        assert instance.parent_id == "tmpl_rent"
        assert instance.is_recurring is False
        assert instance.amount == Decimal("1200.00")
        assert instance.category_id == "cat_4"
        assert instance.created_at == int(now.timestamp() * 1000)
    
    def test_anchors_on_latest_instance(self, monthly_rent, now):
        """Test that existing instances are not generated again."""
        first_pass = materialize_template(monthly_rent, [monthly_rent], now)
        second_pass = materialize_template(monthly_rent, [monthly_rent, *first_pass], now)
        assert second_pass == []
    
    def test_non_template_yields_nothing(self, make_tx, now):
        plain = make_tx(date=datetime(2026, 1, 1))
        assert materialize_template(plain, [plain], now) == []
    
    def test_instance_cap(self, make_tx, now):
        """Test daily backlog stops at the configured cap."""
        template = make_tx(
            date=datetime(2026, 1, 1, 8, 0),
            is_recurring=True,
            recurrence_rule="daily",
        )
        instances = materialize_template(template, [template], now, max_instances=10)
        assert len(instances) == 10
        assert instances[-1].date == datetime(2026, 1, 11, 8, 0)


class TestExpandRecurring:
    """Tests for the boot-time expansion pass."""
    
    def test_applies_balances_and_sorts(self, monthly_rent, accounts, make_tx, now):
        older = make_tx("income", "50", date=datetime(2026, 8, 1))
        result = expand_recurring([monthly_rent, older], accounts, now)
        
        assert result.changed
        assert len(result.new_transactions) == 3
        dates = [tx.date for tx in result.transactions]
        assert dates == sorted(dates, reverse=True)
        balances = {a.id: a.current_balance for a in result.accounts}
        assert balances["A"] == Decimal("-3600.00")
    
    def test_idempotent(self, monthly_rent, accounts, now):
        first = expand_recurring([monthly_rent], accounts, now)
        second = expand_recurring(first.transactions, first.accounts, now)
        assert not second.changed
        assert second.transactions == first.transactions
        assert second.accounts == first.accounts
    
    def test_nothing_due(self, make_tx, accounts, now):
        template = make_tx(
            date=datetime(2026, 10, 12, 9, 0),
            is_recurring=True,
            recurrence_rule="weekly",
        )
        result = expand_recurring([template], accounts, now)
        assert not result.changed
        assert result.accounts == accounts


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
