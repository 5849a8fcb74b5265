# Rev 0.1.0

"""Paths and XDG helpers
- XDG Base Directory locations for data/state/config
- Default DB lives under the XDG data dir
- SQL migrations ship inside the package
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "diyProjects"


def _xdg(var: str, fallback: Path) -> Path:
    return Path(os.environ.get(var) or fallback).expanduser()


def data_dir() -> Path:
    return _xdg("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_NAME


def state_dir() -> Path:
    return _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state") / APP_NAME


def logs_dir() -> Path:
    return state_dir() / "logs"


def config_dir() -> Path:
    return _xdg("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME


def default_db_path() -> Path:
    return data_dir() / "projects.db"


# Package-relative locations
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = PACKAGE_ROOT / "migrations"
SEED_FILE = PACKAGE_ROOT / "seeds" / "seed.sql"


def ensure_dirs() -> None:
    for p in (data_dir(), logs_dir(), config_dir()):
        p.mkdir(parents=True, exist_ok=True)
