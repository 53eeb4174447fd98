# xiaohonghua/services/ledger.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from xiaohonghua.core.balance import compute_balance
from xiaohonghua.logging_setup import get_logger
from xiaohonghua.models.transaction import Transaction, TransactionType

logger = get_logger(__name__)


def add_transaction(
    session: Session,
    amount: int,
    reason: str,
    kind: TransactionType,
    photo: Optional[bytes] = None,
    date: Optional[datetime] = None,
) -> Transaction:
    """
    Validate, insert and commit one transaction.
    Raises InvalidTransaction before anything touches the session.
    """
    tx = Transaction(amount=amount, reason=reason, kind=kind, photo=photo, date=date)
    session.add(tx)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Recorded %s %s%d (%s)", tx.id, kind.symbol, amount, kind.name.lower())
    return tx


def get_transaction(session: Session, tx_id: str) -> Optional[Transaction]:
    return session.get(Transaction, tx_id)


def delete_transaction(session: Session, tx_id: str) -> bool:
    """Remove exactly one record. Returns False if it was already gone."""
    tx = get_transaction(session, tx_id)
    if tx is None:
        return False
    session.delete(tx)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Deleted transaction %s", tx_id)
    return True


def list_transactions(session: Session, newest_first: bool = True) -> List[Transaction]:
    order = Transaction.date.desc() if newest_first else Transaction.date.asc()
    return session.query(Transaction).order_by(order).all()


def get_balance(session: Session) -> int:
    return compute_balance(session.query(Transaction).all())
