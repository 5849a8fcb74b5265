# File: diy_projects/tools/migrate.py
# Usage examples:
#   diy-projects-migrate up
#   diy-projects-migrate status
#   diy-projects-migrate rebuild --seed
#   diy-projects-migrate up --db /path/to/projects.db
#
# Notes:
# - DB path defaults to settings.json, env DIYPROJECTS_DB, then the XDG data dir
# - Applies diy_projects/migrations/*.sql in lexicographic order
# - Records applied migrations (name + sha256) in schema_migrations
# - Seeds from diy_projects/seeds/seed.sql when --seed is given

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from ..repositories.db import Database
from ..utils.config import load_settings, resolve_db_path
from ..utils.paths import MIGRATIONS_DIR, SEED_FILE


def seed(db: Database, seed_file: Path = SEED_FILE) -> bool:
    if not seed_file.exists():
        return False
    print(f"→ Seeding from: {seed_file}")
    with db.session() as conn:
        conn.executescript("BEGIN;\n" + seed_file.read_text(encoding="utf-8") + "\nCOMMIT;")
    return True


def cmd_status(db: Database) -> int:
    applied = db.applied()
    print(f"DB: {db.path}")
    print(f"Migrations dir: {db.migrations_dir}")
    print(f"Applied count: {len(applied)}")
    for name in applied:
        print(f"  ✔ {name}")
    pending = db.pending()
    print(f"Pending count: {len(pending)}")
    for name in pending:
        print(f"  ⧗ {name}")
    return 0


def cmd_up(db: Database, with_seed: bool) -> int:
    applied = db.run_migrations()
    for name in applied:
        print(f"→ Applied migration: {name}")
    if applied:
        print("✓ Database is up to date.")
    else:
        print("✓ No changes. Database already up to date.")
    if with_seed and not seed(db):
        print("ℹ️  Seed requested but no seed.sql found.")
    return 0


def cmd_rebuild(db: Database, with_seed: bool) -> int:
    if db.path.exists():
        print(f"⟲ Rebuilding: removing existing DB {db.path}")
        db.destroy()
    db.run_migrations()
    if with_seed and not seed(db):
        print("ℹ️  Seed requested but no seed.sql found.")
    print("✓ Rebuild complete.")
    return 0


def cmd_verify(db: Database) -> int:
    if not db.path.exists():
        print(f"❌ Database not found at {db.path}")
        return 1
    missing = db.missing_tables()
    if missing:
        print("❌ Missing tables:", ", ".join(missing))
        return 2
    pending = db.pending()
    if pending:
        print("❌ Pending migrations:", ", ".join(pending))
        return 3
    with db.session() as conn:
        (mode,) = conn.execute("PRAGMA journal_mode;").fetchone()
        problems = conn.execute("PRAGMA foreign_key_check;").fetchall()
    if str(mode).lower() != "wal":
        print(f"❌ journal_mode is not WAL (got {mode})")
        return 4
    if problems:
        print(f"❌ Foreign key violations: {len(problems)}")
        return 5
    print("✓ Verification passed.")
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="diy-projects-migrate", description="SQLite migration runner for diyProjects")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser):
        sp.add_argument("--db", type=Path, default=None, help="Path to SQLite DB")
        sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    s_up = sub.add_parser("up", help="Run pending migrations")
    add_common(s_up)
    s_up.add_argument("--seed", action="store_true", help="Seed after applying")

    s_rebuild = sub.add_parser("rebuild", help="Drop and recreate DB from migrations")
    add_common(s_rebuild)
    s_rebuild.add_argument("--seed", action="store_true", help="Seed after rebuild")

    s_status = sub.add_parser("status", help="Show applied and pending migrations")
    add_common(s_status)

    s_verify = sub.add_parser("verify", help="Lightweight structural verification")
    add_common(s_verify)

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    db = Database(resolve_db_path(load_settings(), ns.db), migrations_dir=ns.migrations_dir)
    try:
        if ns.cmd == "status":
            return cmd_status(db)
        if ns.cmd == "up":
            return cmd_up(db, ns.seed)
        if ns.cmd == "rebuild":
            return cmd_rebuild(db, ns.seed)
        if ns.cmd == "verify":
            return cmd_verify(db)
    except sqlite3.Error as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
