"""
Tests for the assistant query surface.

Covers:
1. Period resolution from month offsets
2. Read tools over a small known ledger
3. The addTransaction write tool, including its error replies
"""

from datetime import datetime
from decimal import Decimal

import pytest

from pocketledger.queries import LedgerQueryExecutor, QueryExecutionError


@pytest.fixture
def executor(engine, make_tx):
    engine.add_transaction(make_tx("income", "3000", notes="Salary", date=datetime(2026, 10, 1, 9, 0)))
    engine.add_transaction(make_tx("expense", "120", category_id="cat_1", notes="Whole Foods", date=datetime(2026, 10, 5)))
    engine.add_transaction(make_tx("expense", "30", category_id="cat_1", notes="Starbucks", date=datetime(2026, 10, 5)))
    engine.add_transaction(make_tx("expense", "60", category_id="cat_2", notes="Uber", date=datetime(2026, 10, 12)))
    engine.add_transaction(make_tx("expense", "25", category_id="cat_deleted", date=datetime(2026, 10, 13)))
    engine.add_transaction(make_tx("transfer", "200", to_account_id="C", date=datetime(2026, 10, 14)))
    engine.add_transaction(make_tx("expense", "80", category_id="cat_3", notes="Amazon", date=datetime(2026, 9, 20)))
    return LedgerQueryExecutor(engine)


class TestDispatch:
    
    def test_tool_names(self, executor):
        assert set(executor.tool_names) == {
            "getFinancialSummary",
            "getCategoryBreakdown",
            "getMerchantBreakdown",
            "getMonthlyTrend",
            "searchTransactions",
            "addTransaction",
        }
    
    def test_unknown_tool(self, executor):
        with pytest.raises(QueryExecutionError):
            executor.execute("deleteEverything", {})


class TestReadTools:
    """Tests for the deterministic read tools."""
    
    def test_financial_summary(self, executor):
        """Test the credit card payment counts toward expense."""
        result = executor.execute("getFinancialSummary", {"monthOffset": 0})
        assert result == {
            "period": "October 2026",
            "income": 3000.0,
            "expense": 435.0,
            "net": 2565.0,
            "transactionCount": 6,
        }
    
    def test_previous_month(self, executor):
        result = executor.execute("getFinancialSummary", {"monthOffset": -1})
        assert result["period"] == "September 2026"
        assert result["expense"] == 80.0
    
    def test_positive_offset_also_means_past(self, executor):
        assert executor.execute("getFinancialSummary", {"monthOffset": 1})["period"] == "September 2026"
    
    def test_category_breakdown(self, executor):
        result = executor.execute("getCategoryBreakdown", {"type": "expense"})
        assert result["breakdown"] == [
            {"category": "Food & Dining", "amount": 150.0},
            {"category": "Transport", "amount": 60.0},
            {"category": "Uncategorized", "amount": 25.0},
        ]
    
    def test_income_breakdown(self, executor):
        result = executor.execute("getCategoryBreakdown", {"type": "income"})
        assert result["breakdown"] == [{"category": "Salary", "amount": 3000.0}]
    
    def test_merchant_breakdown(self, executor):
        result = executor.execute("getMerchantBreakdown", {})
        merchants = [row["merchant"] for row in result["breakdown"]]
        assert merchants == ["Whole Foods", "Uber", "Starbucks", "Unspecified"]
    
    def test_breakdown_limit(self, engine, executor):
        limited = LedgerQueryExecutor(engine, breakdown_limit=2)
        assert len(limited.get_merchant_breakdown()["breakdown"]) == 2
    
    def test_monthly_trend(self, executor):
        trend = executor.execute("getMonthlyTrend", {})["trend"]
        assert len(trend) == 31
        by_day = {row["date"]: row["amount"] for row in trend}
        assert by_day["2026-10-05"] == 150.0
        assert by_day["2026-10-14"] == 0.0
    
    def test_custom_month_start(self, engine, executor):
        engine.update_settings({"monthlyStartDate": 10})
        result = executor.get_financial_summary(0)
        assert result["period"] == "Oct 10 - Nov 9"
        assert result["expense"] == 285.0
    
    def test_search_by_notes_and_category(self, executor):
        assert executor.execute("searchTransactions", {"query": "uber"})["count"] == 1
        food = executor.execute("searchTransactions", {"query": "food"})
        assert food["count"] == 2
    
    def test_search_amount_bounds(self, executor):
        result = executor.execute("searchTransactions", {"query": "", "minAmount": 50, "maxAmount": 150})
        amounts = sorted(row["amount"] for row in result["transactions"])
        assert amounts == [60.0, 80.0, 120.0]
    
    def test_search_rejects_non_numeric_bounds(self, executor):
        result = executor.execute("searchTransactions", {"query": "", "minAmount": "lots"})
        assert result["status"] == "error"
        assert executor.execute("searchTransactions", {"query": "", "maxAmount": "none"})["status"] == "error"
    
    def test_search_month_offset(self, executor):
        result = executor.execute("searchTransactions", {"query": "amazon", "monthOffset": 0})
        assert result["count"] == 0
    
    def test_search_limit(self, engine, executor):
        limited = LedgerQueryExecutor(engine, search_limit=2)
        assert limited.search_transactions("")["count"] == 2


class TestAddTransactionTool:
    """Tests for assistant-initiated transactions."""
    
    def test_adds_expense_by_names(self, engine, executor):
        result = executor.execute("addTransaction", {
            "type": "expense",
            "amount": 42.5,
            "categoryName": "transport",
            "accountName": "amex",
        })
        assert result == {"status": "success", "message": "Added ₹42.50 to Transport"}
        tx = engine.transactions[0]
        assert tx.account_id == "C"
        assert tx.category_id == "cat_2"
        assert tx.notes == "AI Entry"
        assert engine.verify_balances() == []
    
    def test_income_defaults(self, engine, executor):
        executor.execute("addTransaction", {"type": "income", "amount": 10})
        tx = engine.transactions[0]
        assert tx.notes == "Income"
        assert tx.category_id == "cat_5"
        assert tx.account_id == "A"
    
    def test_transfer_uses_transfer_category(self, engine, executor):
        result = executor.execute("addTransaction", {
            "type": "transfer",
            "amount": 100,
            "accountName": "checking",
            "toAccountName": "savings",
        })
        assert result["status"] == "success"
        tx = engine.transactions[0]
        assert tx.category_id == "cat_transfer"
        assert tx.to_account_id == "B"
    
    def test_date_only_keeps_time_of_day(self, engine, executor):
        executor.execute("addTransaction", {"type": "expense", "amount": 5, "date": "2026-10-16"})
        tx = next(t for t in engine.transactions if t.date.date().isoformat() == "2026-10-16")
        assert tx.date == datetime(2026, 10, 16, 12, 0, 0)
    
    def test_transfer_without_destination_is_error(self, engine, executor):
        before = len(engine.transactions)
        result = executor.execute("addTransaction", {"type": "transfer", "amount": 100})
        assert result["status"] == "error"
        assert len(engine.transactions) == before
    
    def test_bad_amount_is_error(self, executor):
        assert executor.execute("addTransaction", {"type": "expense", "amount": -3})["status"] == "error"
        assert executor.execute("addTransaction", {"type": "expense"})["status"] == "error"
    
    def test_bad_date_is_error(self, executor):
        result = executor.execute("addTransaction", {"type": "expense", "amount": 3, "date": "someday"})
        assert result["status"] == "error"
    
    def test_amount_is_exact(self, engine, executor):
        executor.execute("addTransaction", {"type": "expense", "amount": 0.1})
        assert engine.transactions[0].amount == Decimal("0.10")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
