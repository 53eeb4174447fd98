import datetime
import enum
import uuid

from sqlalchemy import Column, String, Integer, Text, DateTime, LargeBinary, Enum
from sqlalchemy.orm import declarative_base, validates

Base = declarative_base()


class InvalidTransaction(ValueError):
    pass


class TransactionType(enum.Enum):
    EARNING = "earning"
    SPENDING = "spending"
    PENALTY = "penalty"

    @property
    def label(self) -> str:
        return TYPE_LABELS[self]

    @property
    def sign(self) -> int:
        return TYPE_SIGNS[self]

    @property
    def symbol(self) -> str:
        return "+" if TYPE_SIGNS[self] > 0 else "-"

    @property
    def color(self) -> str:
        return TYPE_COLORS[self]

    @classmethod
    def from_label(cls, label: str) -> "TransactionType":
        for kind, text in TYPE_LABELS.items():
            if text == label:
                return kind
        raise ValueError(f"Unknown transaction type label: {label!r}")


TYPE_LABELS = {
    TransactionType.EARNING: "奖励",
    TransactionType.SPENDING: "花费",
    TransactionType.PENALTY: "扣除",
}
TYPE_SIGNS = {
    TransactionType.EARNING: 1,
    TransactionType.SPENDING: -1,
    TransactionType.PENALTY: -1,
}
TYPE_COLORS = {
    TransactionType.EARNING: "green",
    TransactionType.SPENDING: "blue",
    TransactionType.PENALTY: "red",
}


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(String(36), primary_key=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    kind = Column("type", Enum(TransactionType, name="transaction_type"), nullable=False)
    photo = Column(LargeBinary, nullable=True)

    def __init__(self, amount, reason, kind, photo=None, date=None, id=None):
        # id and date are fixed here and never change afterwards
        super().__init__(
            id=id or str(uuid.uuid4()),
            date=date or datetime.datetime.now(),
            amount=amount,
            reason=reason,
            kind=kind,
            photo=photo,
        )

    @validates("amount")
    def _validate_amount(self, key, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidTransaction(f"amount must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidTransaction(f"amount must be positive, got {value}")
        return value

    @validates("reason")
    def _validate_reason(self, key, value):
        if not isinstance(value, str) or not value.strip():
            raise InvalidTransaction("reason must not be empty")
        return value

    @validates("kind")
    def _validate_kind(self, key, value):
        if not isinstance(value, TransactionType):
            raise InvalidTransaction(f"unknown transaction type {value!r}")
        return value

    @validates("date")
    def _validate_date(self, key, value):
        current = self.__dict__.get("date")
        if current is not None and value != current:
            raise InvalidTransaction("transaction date cannot be changed")
        return value

    @validates("id")
    def _validate_id(self, key, value):
        current = self.__dict__.get("id")
        if current is not None and value != current:
            raise InvalidTransaction("transaction id cannot be changed")
        return value

    def __repr__(self) -> str:
        return f"<Transaction {self.kind.name} {self.amount} {self.reason!r} @ {self.date:%Y-%m-%d %H:%M:%S}>"
