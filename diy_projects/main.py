# Rev 0.1.0

# diy_projects/main.py
from __future__ import annotations
import argparse
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from .app_context import AppContext
from .ui.menu import ProjectsApp
from .utils.config import load_settings, resolve_db_path
from .utils.logging_setup import get_logger, setup_logging


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="diy-projects", description="Console menu for DIY project tracking")
    p.add_argument("--db", type=Path, default=None, help="Path to SQLite DB (default: settings, $DIYPROJECTS_DB, or XDG data dir)")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR (default: settings or $DIYPROJECTS_LOG_LEVEL)")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings()
    logfile = setup_logging(
        ns.log_level or settings.get("log_level"),
        console_level_name=settings.get("console_log_level"),
    )
    log = get_logger("main")

    db_path = resolve_db_path(settings, ns.db)
    try:
        ctx = AppContext.create(db_path)
    except sqlite3.Error as e:
        log.error("Could not open database %s: %s", db_path, e)
        print(f"Could not open database {db_path}: {e}", file=sys.stderr)
        return 2

    log.info("Menu starting; DB=%s, log=%s", ctx.db_path, logfile)
    return ProjectsApp(ctx.project_service).run()


if __name__ == "__main__":
    raise SystemExit(main())
