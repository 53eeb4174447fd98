# xiaohonghua/services/backup.py
from __future__ import annotations

import os
from concurrent.futures import Executor, Future
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from xiaohonghua.logging_setup import get_logger
from xiaohonghua.services.db import get_session
from xiaohonghua.services.file_handler import export_transactions_to_csv_text

logger = get_logger(__name__)

BACKUP_PREFIX = "xiaohonghua_backup_"
BACKUP_TS_FMT = "%Y-%m-%d_%H-%M-%S"


def backup_filename(now: Optional[datetime] = None) -> str:
    return f"{BACKUP_PREFIX}{(now or datetime.now()).strftime(BACKUP_TS_FMT)}.csv"


def write_backup(backup_dir, csv_text: str, now: Optional[datetime] = None) -> Path:
    """Write one snapshot. Raises OSError (FileExistsError if the name is taken)."""
    directory = Path(backup_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename(now)
    # "x": snapshots are never overwritten
    with open(path, "x", encoding="utf-8", newline="") as fh:
        fh.write(csv_text)
    return path


def list_backups(backup_dir) -> List[Path]:
    """Existing snapshots, newest first."""
    directory = Path(backup_dir)
    if not directory.is_dir():
        return []
    return sorted(directory.glob(f"{BACKUP_PREFIX}*.csv"), key=lambda p: p.name, reverse=True)


class BackupTrigger:
    """
    Lifecycle observer that snapshots the whole ledger to CSV.

    The write is fire-and-forget: it goes to `executor` when given, inline otherwise.
    Failures are logged and dropped; nothing is retried.
    """

    def __init__(
        self,
        backup_dir,
        session_factory: Callable[[], Session] = get_session,
        executor: Optional[Executor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.backup_dir = os.fspath(backup_dir)
        self.enabled = True
        self._session_factory = session_factory
        self._executor = executor
        self._clock = clock

    def apply_settings(self, settings: dict) -> None:
        """Follow the saved settings file (shared by every browser session)."""
        self.enabled = bool(settings.get("auto_backup", True))
        if settings.get("backup_dir"):
            self.backup_dir = os.fspath(settings["backup_dir"])

    def __call__(self, old_phase=None, new_phase=None) -> Optional[Future]:
        if not self.enabled:
            logger.debug("Auto-backup disabled, skipping")
            return None
        if self._executor is not None:
            try:
                return self._executor.submit(self.run)
            except RuntimeError:
                # executor already shut down (interpreter exit)
                logger.debug("Backup executor unavailable, writing inline")
        self.run()
        return None

    def run(self) -> Optional[Path]:
        """Take one snapshot now. Returns the file written, or None on failure."""
        try:
            session = self._session_factory()
            try:
                csv_text = export_transactions_to_csv_text(session)
            finally:
                session.close()
            path = write_backup(self.backup_dir, csv_text, self._clock())
        except (OSError, SQLAlchemyError):
            logger.exception("Failed to save backup to %s", self.backup_dir)
            return None
        logger.info("Backup saved to: %s", path)
        return path
