# diy_projects/utils/config.py
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .logging_setup import get_logger
from .paths import config_dir, default_db_path

_log = get_logger("config")

_DEFAULTS: Dict[str, Any] = {
    "db_path": None,        # None -> XDG data dir
    "log_level": "INFO",
    "console_log_level": "WARNING",
}

ENV_OVERRIDES = {
    "DIYPROJECTS_DB": "db_path",
    "DIYPROJECTS_LOG_LEVEL": "log_level",
}


def settings_file() -> Path:
    return config_dir() / "settings.json"


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    settings = _DEFAULTS.copy()
    if path.exists():
        try:
            settings.update(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            _log.warning("Ignoring unreadable settings file %s: %s", path, e)
    for env, key in ENV_OVERRIDES.items():
        if os.environ.get(env):
            settings[key] = os.environ[env]
    return settings


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def resolve_db_path(settings: Dict[str, Any], override: Optional[str | Path] = None) -> Path:
    raw = override or settings.get("db_path")
    return Path(raw).expanduser() if raw else default_db_path()
