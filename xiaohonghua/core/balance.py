# xiaohonghua/core/balance.py
from typing import Dict, Iterable

from xiaohonghua.models.transaction import TransactionType


def contribution(tx) -> int:
    """Signed effect of one transaction on the balance."""
    return tx.kind.sign * tx.amount


def compute_balance(transactions: Iterable) -> int:
    """
    Earnings add, spendings and penalties subtract.
    Accepts anything with `kind` and `amount` (ORM rows, decoded CSV records).
    """
    return sum(contribution(tx) for tx in transactions)


def totals_by_kind(transactions: Iterable) -> Dict[TransactionType, int]:
    totals = {kind: 0 for kind in TransactionType}
    for tx in transactions:
        totals[tx.kind] += tx.amount
    return totals
