"""Tests for reference validation of transactions."""

import pytest

from pocketledger.models.defaults import default_categories
from pocketledger.validation import TransactionValidator


@pytest.fixture
def validator():
    return TransactionValidator()


class TestTransactionValidator:
    
    def test_valid_expense(self, validator, accounts, make_tx):
        result = validator.validate(make_tx(), accounts, default_categories())
        assert result.is_valid
        assert result.issues == []
    
    def test_unknown_account_is_error(self, validator, accounts, make_tx):
        result = validator.validate(make_tx(account_id="Z"), accounts, default_categories())
        assert result.has_errors
        assert result.issues[0].field == "account_id"
    
    def test_unknown_destination_is_error(self, validator, accounts, make_tx):
        tx = make_tx("transfer", "5", to_account_id="Z")
        result = validator.validate(tx, accounts, default_categories())
        assert [i.field for i in result.issues if i.severity == "error"] == ["to_account_id"]
    
    def test_unknown_category_is_warning(self, validator, accounts, make_tx):
        result = validator.validate(make_tx(category_id="cat_gone"), accounts, default_categories())
        assert result.is_valid
        assert result.warnings[0].issue_type == "unknown_reference"
    
    def test_category_type_mismatch_is_warning(self, validator, accounts, make_tx):
        """Test an expense filed under an income category."""
        result = validator.validate(make_tx("expense", category_id="cat_5"), accounts, default_categories())
        assert result.is_valid
        assert result.warnings[0].issue_type == "type_mismatch"
    
    def test_transfer_skips_type_check(self, validator, accounts, make_tx):
        tx = make_tx("transfer", "5", to_account_id="B", category_id="cat_5")
        assert validator.validate(tx, accounts, default_categories()).issues == []
    
    def test_new_id_must_be_unique(self, validator, make_tx):
        existing = [make_tx(id="t1"), make_tx(id="t2")]
        assert validator.check_new_id(make_tx(id="t3"), existing).is_valid
        result = validator.check_new_id(make_tx(id="t2"), existing)
        assert result.has_errors
        assert result.issues[0].field == "id"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
