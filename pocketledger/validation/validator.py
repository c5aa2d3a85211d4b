"""
Semantic Transaction Validation

Schema problems (negative amounts, a transfer without a destination) are
already rejected by the models. This stage checks a transaction against
the ledger it is about to join:

ERRORS (block the mutation):
- id already used by a transaction in the ledger (checked on add, always on)
- account_id does not name an existing account
- to_account_id does not name an existing account

WARNINGS (logged, never block):
- category_id does not name an existing category
- category type disagrees with the transaction type

Transfers are exempt from the category type check: they use the reserved
transfer category.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from pocketledger.models.ledger import (
    Account,
    Category,
    Transaction,
    TransactionType,
    TransferTransaction,
)
from pocketledger.models.reports import ValidationIssue, ValidationResult


class TransactionValidator:
    """Checks transactions for references the ledger cannot resolve."""
    
    def validate(
        self,
        tx: Transaction,
        accounts: list[Account],
        categories: list[Category],
    ) -> ValidationResult:
        issues = self._check_accounts(tx, {a.id for a in accounts})
        issues.extend(self._check_category(tx, {c.id: c for c in categories}))
        return ValidationResult(transaction_id=tx.id, issues=issues)
    
    def _check_accounts(self, tx: Transaction, account_ids: set[str]) -> list[ValidationIssue]:
        issues = []
        
        if tx.account_id not in account_ids:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="unknown_reference",
                message=f"Account {tx.account_id} does not exist",
                severity="error",
            ))
        
        if isinstance(tx, TransferTransaction) and tx.to_account_id not in account_ids:
            issues.append(ValidationIssue(
                field="to_account_id",
                issue_type="unknown_reference",
                message=f"Destination account {tx.to_account_id} does not exist",
                severity="error",
            ))
        
        return issues
    
    def _check_category(
        self,
        tx: Transaction,
        categories: dict[str, Category],
    ) -> list[ValidationIssue]:
        category = categories.get(tx.category_id)
        if category is None:
            return [ValidationIssue(
                field="category_id",
                issue_type="unknown_reference",
                message=f"Category {tx.category_id} does not exist; it will show as uncategorized",
                severity="warning",
            )]
        
        if tx.type != TransactionType.TRANSFER and category.type.value != tx.type:
            return [ValidationIssue(
                field="category_id",
                issue_type="type_mismatch",
                message=f"{category.type.value.title()} category '{category.name}' used on a {tx.type} transaction",
                severity="warning",
            )]
        
        return []
    
    @staticmethod
    def check_new_id(tx: Transaction, transactions: list[Transaction]) -> ValidationResult:
        """Error if `tx.id` is already used by one of `transactions`."""
        issues = []
        if any(existing.id == tx.id for existing in transactions):
            issues.append(ValidationIssue(
                field="id",
                issue_type="duplicate_id",
                message=f"Transaction {tx.id} already exists",
                severity="error",
            ))
        return ValidationResult(transaction_id=tx.id, issues=issues)
