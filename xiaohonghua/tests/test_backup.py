import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from xiaohonghua.core.lifecycle import AppPhase, LifecycleMonitor
from xiaohonghua.services.backup import BackupTrigger, backup_filename, list_backups, write_backup
from xiaohonghua.services.db import get_session
from xiaohonghua.services.file_handler import decode_transactions_csv


class FakeClock:
    def __init__(self, start=datetime(2025, 9, 5, 21, 0, 0)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


def _seed(session, sample_transactions):
    for tx in sample_transactions:
        session.add(tx)
    session.commit()


def test_backup_filename():
    assert backup_filename(datetime(2025, 9, 5, 7, 8, 9)) == "xiaohonghua_backup_2025-09-05_07-08-09.csv"


def test_write_backup_never_overwrites(tmp_path):
    when = datetime(2025, 1, 1, 0, 0, 0)
    path = write_backup(tmp_path / "b", "first", when)
    assert path.read_text(encoding="utf-8") == "first"
    try:
        write_backup(tmp_path / "b", "second", when)
    except FileExistsError:
        pass
    else:
        raise AssertionError("backup was overwritten")
    assert path.read_text(encoding="utf-8") == "first"


def test_run_writes_full_ledger_snapshot(session, sample_transactions, tmp_path):
    _seed(session, sample_transactions)
    trigger = BackupTrigger(tmp_path / "backups", clock=FakeClock())

    path = trigger.run()

    assert path.name == "xiaohonghua_backup_2025-09-05_21-00-00.csv"
    records = decode_transactions_csv(path.read_text(encoding="utf-8"))
    assert [r.reason for r in records] == ["allowance", "candy", "late"]


def test_one_backup_per_background_transition(session, sample_transactions, tmp_path):
    _seed(session, sample_transactions)
    backup_dir = tmp_path / "backups"
    monitor = LifecycleMonitor()
    monitor.subscribe(BackupTrigger(backup_dir, clock=FakeClock()))

    # ledger changes alone never back up
    session.delete(sample_transactions[0])
    session.commit()
    assert list_backups(backup_dir) == []

    monitor.transition(AppPhase.INACTIVE)
    monitor.transition(AppPhase.BACKGROUND)
    assert len(list_backups(backup_dir)) == 1

    monitor.transition(AppPhase.ACTIVE)
    monitor.transition(AppPhase.BACKGROUND)
    backups = list_backups(backup_dir)
    assert [p.name for p in backups] == [
        "xiaohonghua_backup_2025-09-05_21-00-01.csv",
        "xiaohonghua_backup_2025-09-05_21-00-00.csv",
    ]


def test_backup_runs_on_executor(session, tmp_path):
    with ThreadPoolExecutor(max_workers=1) as executor:
        trigger = BackupTrigger(tmp_path / "backups", executor=executor, clock=FakeClock())
        future = trigger(AppPhase.ACTIVE, AppPhase.BACKGROUND)
        path = future.result(timeout=10)
    assert path.read_text(encoding="utf-8") == "Type,Amount,Reason,Date,Time\n"


def test_shut_down_executor_falls_back_to_inline(session, tmp_path):
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    trigger = BackupTrigger(tmp_path / "backups", executor=executor, clock=FakeClock())
    assert trigger() is None
    assert len(list_backups(tmp_path / "backups")) == 1


def test_disabled_trigger_does_nothing(session, tmp_path):
    trigger = BackupTrigger(tmp_path / "backups")
    trigger.enabled = False
    assert trigger() is None
    assert list_backups(tmp_path / "backups") == []


def test_write_failure_is_logged_and_swallowed(session, tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    trigger = BackupTrigger(blocker, clock=FakeClock())

    with caplog.at_level(logging.ERROR, logger="xiaohonghua"):
        assert trigger.run() is None
        trigger()
    assert "Failed to save backup" in caplog.text


def test_database_failure_is_logged_and_swallowed(tmp_path, caplog):
    def broken_session():
        raise OperationalError("SELECT", {}, Exception("db locked"))

    trigger = BackupTrigger(tmp_path / "backups", session_factory=broken_session)
    with caplog.at_level(logging.ERROR, logger="xiaohonghua"):
        assert trigger.run() is None
    assert list_backups(tmp_path / "backups") == []


def test_list_backups_missing_dir(tmp_path):
    assert list_backups(tmp_path / "nowhere") == []


def test_default_session_factory(session, tmp_path):
    trigger = BackupTrigger(tmp_path / "backups", session_factory=get_session, clock=FakeClock())
    assert trigger.run() is not None


def test_trigger_follows_saved_settings(session, tmp_path):
    trigger = BackupTrigger(tmp_path / "old", clock=FakeClock())
    trigger.apply_settings({"auto_backup": False, "backup_dir": str(tmp_path / "new")})
    assert trigger.enabled is False
    assert trigger() is None

    trigger.apply_settings({"auto_backup": True, "backup_dir": str(tmp_path / "new")})
    trigger()
    assert len(list_backups(tmp_path / "new")) == 1
    assert list_backups(tmp_path / "old") == []


def test_trigger_keeps_dir_when_setting_blank(tmp_path):
    trigger = BackupTrigger(tmp_path / "kept")
    trigger.apply_settings({"backup_dir": ""})
    assert trigger.backup_dir == str(tmp_path / "kept")
    assert trigger.enabled is True
