# xiaohonghua/services/file_handler.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from io import StringIO
from typing import Iterable, List, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from xiaohonghua.logging_setup import get_logger
from xiaohonghua.models.transaction import InvalidTransaction, Transaction, TransactionType

logger = get_logger(__name__)

CSV_COLUMNS = ["Type", "Amount", "Reason", "Date", "Time"]
CSV_HEADER = ",".join(CSV_COLUMNS)
DATE_FMT = "%Y-%m-%d"
TIME_FMT = "%H:%M:%S"


class CsvFormatError(ValueError):
    pass


@dataclass(frozen=True)
class CsvRecord:
    kind: TransactionType
    amount: int
    reason: str
    date: datetime


def _local(dt: datetime) -> datetime:
    """Naive datetimes are already local; aware ones get converted."""
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def _quote(reason: str) -> str:
    return '"' + reason.replace('"', '""') + '"'


def encode_transactions_csv(transactions: Iterable) -> str:
    """Ledger -> CSV text, oldest first. Only the reason column is quoted."""
    lines = [CSV_HEADER]
    for tx in sorted(transactions, key=lambda t: _local(t.date)):
        when = _local(tx.date)
        lines.append(",".join([
            tx.kind.label,
            str(int(tx.amount)),
            _quote(tx.reason),
            when.strftime(DATE_FMT),
            when.strftime(TIME_FMT),
        ]))
    return "\n".join(lines) + "\n"


def _read_frame(filelike) -> pd.DataFrame:
    try:
        # everything as text: amounts are validated below, "NA"/"null" reasons stay literal
        df = pd.read_csv(filelike, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as exc:
        raise CsvFormatError("CSV is empty") from exc
    except pd.errors.ParserError as exc:
        raise CsvFormatError(f"Failed to read CSV: {exc}") from exc
    df.columns = [c.strip() for c in df.columns]
    missing = set(CSV_COLUMNS) - set(df.columns)
    if missing:
        raise CsvFormatError(f"Missing required columns: {', '.join(sorted(missing))}")
    return df


def _field(row, name: str) -> str:
    # short rows come back as NaN even with dtype=str
    value = row[name]
    return value if isinstance(value, str) else ""


def _record_from_row(row) -> CsvRecord:
    try:
        kind = TransactionType.from_label(_field(row, "Type").strip())
    except ValueError as exc:
        raise CsvFormatError(str(exc)) from exc
    amount_text = _field(row, "Amount").strip()
    if not amount_text.isascii() or not amount_text.isdigit() or int(amount_text) <= 0:
        raise CsvFormatError(f"invalid amount -> {amount_text!r}")
    day, clock = _field(row, "Date").strip(), _field(row, "Time").strip()
    try:
        date = datetime.strptime(f"{day} {clock}", f"{DATE_FMT} {TIME_FMT}")
    except ValueError as exc:
        raise CsvFormatError(f"invalid date/time -> {day!r} {clock!r}") from exc
    return CsvRecord(kind=kind, amount=int(amount_text), reason=_field(row, "Reason"), date=date)


def decode_transactions_csv(text: str) -> List[CsvRecord]:
    """Inverse of encode_transactions_csv. Raises CsvFormatError on the first bad row."""
    df = _read_frame(StringIO(text))
    records = []
    for idx, row in df.iterrows():
        try:
            records.append(_record_from_row(row))
        except CsvFormatError as exc:
            raise CsvFormatError(f"Row {idx + 1}: {exc}") from exc
    return records


def export_transactions_to_csv_text(session: Session) -> str:
    """Query every transaction (oldest first) and return CSV text."""
    rows = session.query(Transaction).order_by(Transaction.date.asc()).all()
    return encode_transactions_csv(rows)


def export_transactions_to_csv_bytes(session: Session) -> bytes:
    return export_transactions_to_csv_text(session).encode("utf-8")


def _record_key(kind, amount, reason, date) -> tuple:
    return kind, amount, reason, date.replace(microsecond=0)


def _existing_keys(session: Session) -> Counter:
    """How many stored rows share each (type, amount, reason, second)."""
    return Counter(
        _record_key(t.kind, t.amount, t.reason, t.date)
        for t in session.query(Transaction).all()
    )


def import_transactions_from_csv_filelike(filelike, session: Session) -> Tuple[int, int, list]:
    """
    Restore a backup/export CSV into the ledger, keeping the original dates.
    Returns (inserted_count, skipped_count, errors_list)
    """
    errors = []
    try:
        df = _read_frame(filelike)
    except CsvFormatError as exc:
        errors.append(str(exc))
        return 0, 0, errors

    # only rows stored before this restore count as duplicates;
    # identical rows inside one file are all kept
    existing = _existing_keys(session)
    inserted = 0
    skipped = 0
    for idx, row in df.iterrows():
        try:
            record = _record_from_row(row)
        except CsvFormatError as exc:
            errors.append(f"Row {idx + 1}: {exc}")
            skipped += 1
            continue

        key = _record_key(record.kind, record.amount, record.reason, record.date)
        if existing[key] > 0:
            existing[key] -= 1
            skipped += 1
            continue

        try:
            session.add(Transaction(
                amount=record.amount,
                reason=record.reason,
                kind=record.kind,
                date=record.date,
            ))
        except InvalidTransaction as exc:
            errors.append(f"Row {idx + 1} error: {exc}")
            skipped += 1
            continue
        inserted += 1

    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Restore commit failed")
        errors.append(f"DB commit failed: {exc}")
        return 0, skipped, errors

    logger.info("Restored %d transactions (%d skipped)", inserted, skipped)
    return inserted, skipped, errors
