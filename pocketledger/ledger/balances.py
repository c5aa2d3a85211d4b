"""
The balance-effect rule.

Every change to an account balance in the ledger goes through
`balance_effect`. Per account, per transaction:

    income   on account_id      +amount
    expense  on account_id      -amount
    transfer on account_id      -amount   (source debit)
    transfer on to_account_id   +amount   (destination credit)
    anything else                0
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from pocketledger.models.ledger import (
    Account,
    Transaction,
    TransactionType,
    TransferTransaction,
)
from pocketledger.models.reports import BalanceDrift


ZERO = Decimal("0.00")


def balance_effect(tx: Transaction, account_id: str) -> Decimal:
    """Signed amount `tx` contributes to the balance of `account_id`."""
    if tx.type == TransactionType.INCOME and tx.account_id == account_id:
        return tx.amount
    if tx.type == TransactionType.EXPENSE and tx.account_id == account_id:
        return -tx.amount
    if isinstance(tx, TransferTransaction):
        if tx.account_id == account_id:
            return -tx.amount
        if tx.to_account_id == account_id:
            return tx.amount
    return ZERO


def touched_accounts(tx: Transaction) -> set[str]:
    accounts = {tx.account_id}
    if isinstance(tx, TransferTransaction):
        accounts.add(tx.to_account_id)
    return accounts


def net_deltas(
    applied: Iterable[Transaction] = (),
    reversed_: Iterable[Transaction] = (),
) -> dict[str, Decimal]:
    """
    Combined per-account delta of applying some transactions and undoing others.
    
    Computing both sides in one pass lets an account touched by the old and
    new version of an edited transaction net out correctly.
    """
    deltas: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for tx in applied:
        for account_id in touched_accounts(tx):
            deltas[account_id] += balance_effect(tx, account_id)
    for tx in reversed_:
        for account_id in touched_accounts(tx):
            deltas[account_id] -= balance_effect(tx, account_id)
    return {account_id: delta for account_id, delta in deltas.items() if delta != ZERO}


def apply_deltas(accounts: list[Account], deltas: dict[str, Decimal]) -> list[Account]:
    """New account list with deltas added; untouched accounts are reused as-is."""
    if not deltas:
        return list(accounts)
    return [
        account.model_copy(update={"current_balance": account.current_balance + deltas[account.id]})
        if account.id in deltas
        else account
        for account in accounts
    ]


def expected_balance(account_id: str, transactions: Iterable[Transaction]) -> Decimal:
    return sum((balance_effect(tx, account_id) for tx in transactions), ZERO)


def recompute_balances(accounts: list[Account], transactions: list[Transaction]) -> list[Account]:
    """Rebuild every cached balance from scratch."""
    return [
        account.model_copy(update={"current_balance": expected_balance(account.id, transactions)})
        for account in accounts
    ]


def find_drift(accounts: list[Account], transactions: list[Transaction]) -> list[BalanceDrift]:
    """Accounts whose cached balance disagrees with their transactions."""
    drift = []
    for account in accounts:
        expected = expected_balance(account.id, transactions)
        if account.current_balance != expected:
            drift.append(BalanceDrift(
                account_id=account.id,
                cached=account.current_balance,
                expected=expected,
            ))
    return drift
