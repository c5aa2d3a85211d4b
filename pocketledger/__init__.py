"""
PocketLedger - Core Package

The ledger state engine behind a personal finance tracker: accounts,
categorized transactions, budgets and a daily logging streak, persisted
to a simple key-value blob store.

DESIGN PRINCIPLES:
1. Account balances are a cache of transaction effects and never drift
2. Every mutation writes through to storage before returning
3. Reads degrade gracefully on missing references
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PocketLedger Team"
