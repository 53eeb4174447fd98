# xiaohonghua/services/settings.py
import json
import os
from typing import Dict, Any

from xiaohonghua.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULTS: Dict[str, Any] = {
    "backup_dir": os.getenv("BACKUP_DIR", "data/backups"),
    "auto_backup": True,
}


def _settings_path() -> str:
    return os.getenv("SETTINGS_PATH", "data/settings.json")


def load_settings() -> Dict[str, Any]:
    path = _settings_path()
    if not os.path.exists(path):
        save_settings(DEFAULTS)
        return DEFAULTS.copy()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError):
        # if file is corrupted, overwrite with defaults
        logger.warning("Settings file %s unreadable, resetting to defaults", path, exc_info=True)
        save_settings(DEFAULTS)
        return DEFAULTS.copy()
    # merge defaults
    out = DEFAULTS.copy()
    if isinstance(data, dict):
        out.update(data)
    return out


def save_settings(settings: Dict[str, Any]) -> None:
    path = _settings_path()
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(settings, fh, indent=2, ensure_ascii=False)
