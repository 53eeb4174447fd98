import os
from datetime import datetime, timedelta

import pytest

from xiaohonghua.models.transaction import Transaction, TransactionType
from xiaohonghua.services.db import configure_database, init_db, get_session


@pytest.fixture(autouse=True)
def _isolate_files(tmp_path, monkeypatch):
    """Keep settings and the default DB out of the working tree."""
    monkeypatch.setenv("SETTINGS_PATH", os.fspath(tmp_path / "settings.json"))
    monkeypatch.setenv("DB_PATH", os.fspath(tmp_path / "ledger.db"))


@pytest.fixture
def session(tmp_path):
    configure_database(os.fspath(tmp_path / "ledger.db"))
    init_db()
    s = get_session()
    yield s
    s.close()


@pytest.fixture
def sample_transactions():
    start = datetime(2025, 9, 5, 8, 30, 0)
    return [
        Transaction(amount=100, reason="allowance", kind=TransactionType.EARNING, date=start),
        Transaction(amount=30, reason="candy", kind=TransactionType.SPENDING, date=start + timedelta(hours=1)),
        Transaction(amount=10, reason="late", kind=TransactionType.PENALTY, date=start + timedelta(hours=2, seconds=5)),
    ]
