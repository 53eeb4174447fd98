# xiaohonghua/core/draft.py
from __future__ import annotations

import re
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.orm import Session

from xiaohonghua.logging_setup import get_logger
from xiaohonghua.models.transaction import InvalidTransaction, Transaction, TransactionType
from xiaohonghua.services.ledger import add_transaction

logger = get_logger(__name__)

_AMOUNT_RE = re.compile(r"\+?[0-9]+")


def parse_amount(text) -> Optional[int]:
    """Form input -> positive int, or None if it isn't one."""
    if text is None:
        return None
    text = str(text).strip()
    if not _AMOUNT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value > 0 else None


@dataclass
class TransactionDraft:
    """In-progress transaction owned by the add-transaction workflow."""

    kind: TransactionType = TransactionType.EARNING
    amount_text: str = ""
    reason: str = ""
    photo: Optional[bytes] = None
    closed: bool = False
    _photo_token: int = field(default=0, repr=False)

    @property
    def amount(self) -> Optional[int]:
        return parse_amount(self.amount_text)

    @property
    def can_save(self) -> bool:
        return not self.closed and self.amount is not None and bool(self.reason.strip())

    def attach_photo(self, data: Optional[bytes]) -> None:
        self._photo_token += 1
        self.photo = data

    def clear_photo(self) -> None:
        self.attach_photo(None)

    def load_photo(self, loader: Callable[[], bytes], executor: Optional[Executor] = None) -> Optional[Future]:
        """
        Load photo bytes off the UI path. The result lands on the draft only if
        the draft is still open and no newer load/attach happened meanwhile.
        A failed load leaves the draft without a photo.
        """
        self._photo_token += 1
        token = self._photo_token

        def finish(data) -> None:
            if self.closed or token != self._photo_token:
                logger.debug("Dropping stale photo load")
                return
            self.photo = data

        def work() -> None:
            try:
                data = loader()
            except Exception:
                logger.debug("Photo load failed; continuing without photo", exc_info=True)
                data = None
            finish(data)

        if executor is None:
            work()
            return None
        return executor.submit(work)

    def commit(self, session: Session) -> Transaction:
        if self.closed:
            raise InvalidTransaction("draft was already saved or discarded")
        amount = self.amount
        if amount is None:
            raise InvalidTransaction(f"amount must be a positive integer, got {self.amount_text!r}")
        tx = add_transaction(session, amount=amount, reason=self.reason, kind=self.kind, photo=self.photo)
        self.closed = True
        return tx

    def discard(self) -> None:
        self.closed = True
        self.photo = None
