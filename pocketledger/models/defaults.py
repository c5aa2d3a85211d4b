"""
Built-in records returned when storage holds nothing yet.

Functions rather than module constants so every caller gets fresh,
independently mutable copies.
"""

from pocketledger.models.ledger import Account, AccountType, Category, CategoryType


TRANSFER_CATEGORY_ID = "cat_transfer"


def default_categories() -> list[Category]:
    """The stock category set, including the reserved transfer category."""
    return [
        Category(id="cat_1", name="Food & Dining", type=CategoryType.EXPENSE, icon="pizza"),
        Category(id="cat_2", name="Transport", type=CategoryType.EXPENSE, icon="car"),
        Category(id="cat_3", name="Shopping", type=CategoryType.EXPENSE, icon="shopping-bag"),
        Category(id="cat_4", name="Housing", type=CategoryType.EXPENSE, icon="home"),
        Category(id="cat_5", name="Salary", type=CategoryType.INCOME, icon="banknote"),
        Category(id="cat_6", name="Side Hustle", type=CategoryType.INCOME, icon="laptop"),
        Category(id="cat_7", name="Entertainment", type=CategoryType.EXPENSE, icon="film"),
        Category(id="cat_8", name="Health", type=CategoryType.EXPENSE, icon="activity"),
        Category(
            id=TRANSFER_CATEGORY_ID,
            name="Transfer",
            type=CategoryType.EXPENSE,
            icon="arrow-right-left",
        ),
    ]


def default_accounts() -> list[Account]:
    """Starter accounts for a brand new ledger."""
    return [
        Account(id="acc_1", name="Cash", type=AccountType.CASH, currency="INR"),
        Account(id="acc_2", name="Primary Bank", type=AccountType.BANK, currency="INR"),
        Account(id="acc_3", name="Savings", type=AccountType.SAVINGS, currency="INR"),
    ]
