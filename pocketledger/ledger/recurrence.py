"""
Recurring transaction materialization.

Runs once at boot. For every recurring template, the occurrences that
fell due since the last generated instance are synthesized, their balance
effects applied, and the collection re-sorted newest first.

The anchor for each template is its most recent instance (or the
template itself when none exist yet), so running the expansion again
over its own output generates nothing new.

Generation stops after `max_instances` occurrences per template per run.
A template that missed more periods than that under-generates; the
remainder is picked up on the next boot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from pocketledger.ledger.balances import apply_deltas, net_deltas
from pocketledger.log import get_logger
from pocketledger.models.ledger import (
    Account,
    RecurrenceRule,
    Transaction,
    new_id,
)


DEFAULT_MAX_INSTANCES = 365

STEPS = {
    RecurrenceRule.DAILY: relativedelta(days=1),
    RecurrenceRule.WEEKLY: relativedelta(weeks=1),
    RecurrenceRule.MONTHLY: relativedelta(months=1),
}

logger = get_logger(__name__)


@dataclass
class RecurrenceResult:
    """Output of one expansion pass."""
    
    new_transactions: list[Transaction] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)
    
    @property
    def changed(self) -> bool:
        return bool(self.new_transactions)


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda tx: tx.date, reverse=True)


def next_occurrence(anchor: datetime, rule: RecurrenceRule) -> datetime:
    return anchor + STEPS[rule]


def latest_instance(template: Transaction, transactions: list[Transaction]) -> Optional[Transaction]:
    """Most recent generated instance of `template`, if any."""
    children = [tx for tx in transactions if tx.parent_id == template.id]
    if not children:
        return None
    return max(children, key=lambda tx: tx.date)


def materialize_template(
    template: Transaction,
    transactions: list[Transaction],
    now: datetime,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> list[Transaction]:
    """
    Instances of one template that are due by `now` but missing.
    
    Instances copy every template field except: a fresh id, the occurrence
    date, `created_at` of now, `parent_id` set to the template and
    `is_recurring` cleared.
    """
    if not template.is_template:
        return []
    
    last = latest_instance(template, transactions)
    anchor = last.date if last is not None else template.date
    created_at = int(now.timestamp() * 1000)
    
    generated = []
    while len(generated) < max_instances:
        due = next_occurrence(anchor, template.recurrence_rule)
        if due > now:
            break
        generated.append(template.model_copy(update={
            "id": new_id(),
            "date": due,
            "created_at": created_at,
            "parent_id": template.id,
            "is_recurring": False,
        }))
        anchor = due
    
    if len(generated) >= max_instances and next_occurrence(anchor, template.recurrence_rule) <= now:
        logger.warning(
            "recurrence_instance_cap_reached",
            template_id=template.id,
            max_instances=max_instances,
        )
    return generated


def expand_recurring(
    transactions: list[Transaction],
    accounts: list[Account],
    now: datetime,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> RecurrenceResult:
    """
    Materialize every recurring template's backlog up to `now`.
    
    Returns the new instances together with the merged, re-sorted
    transaction list and the accounts with the instances' effects applied.
    When nothing is due, the inputs are returned unchanged.
    """
    new_transactions: list[Transaction] = []
    for tx in transactions:
        new_transactions.extend(materialize_template(tx, transactions, now, max_instances))
    
    if not new_transactions:
        return RecurrenceResult(transactions=list(transactions), accounts=list(accounts))
    
    updated_accounts = apply_deltas(accounts, net_deltas(applied=new_transactions))
    merged = sort_newest_first(new_transactions + list(transactions))
    
    logger.info(
        "recurrence_expanded",
        generated=len(new_transactions),
        templates=len({tx.parent_id for tx in new_transactions}),
    )
    return RecurrenceResult(
        new_transactions=new_transactions,
        transactions=merged,
        accounts=updated_accounts,
    )
