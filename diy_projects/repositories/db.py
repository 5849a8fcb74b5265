# Rev 0.1.0

"""SQLite connection provider & migration runner
- One connection per operation via connect(); callers close it (session() does)
- WAL mode, foreign_keys=ON, busy_timeout, sqlite3.Row rows
- isolation_level=None: transactions are explicit (transaction())
- Applies SQL files in migrations/ in lexical order
- Tracks applied files in schema_migrations(filename, sha256, applied_at_utc)
"""
from __future__ import annotations
import hashlib
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator

from ..utils.logging_setup import get_logger
from ..utils.paths import MIGRATIONS_DIR, default_db_path

# DECIMAL(7,2) columns round-trip as Decimal
sqlite3.register_adapter(Decimal, str)
sqlite3.register_converter("DECIMAL", lambda b: Decimal(b.decode("ascii")))

REQUIRED_TABLES = (
    "project",
    "material",
    "step",
    "category",
    "project_category",
    "schema_migrations",
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class Database:
    """Connection factory for one SQLite file. Holds no open connection itself."""

    def __init__(self, path: Path | str | None = None, migrations_dir: Path | str = MIGRATIONS_DIR) -> None:
        self.path = Path(path) if path else default_db_path()
        self.migrations_dir = Path(migrations_dir)
        self._log = get_logger("Database")

    def connect(self) -> sqlite3.Connection:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise sqlite3.OperationalError(f"cannot create database directory {self.path.parent}: {e}") from e
        conn = sqlite3.connect(self.path, detect_types=sqlite3.PARSE_DECLTYPES, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys=ON;")
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Connection that is closed on every exit path."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        BEGIN IMMEDIATE ... COMMIT on success; ROLLBACK and re-raise on any error.
        IMMEDIATE takes the write lock up front so concurrent writers queue on
        busy_timeout instead of failing at COMMIT.
        """
        with self.session() as conn:
            conn.execute("BEGIN IMMEDIATE;")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK;")
                raise
            else:
                conn.execute("COMMIT;")

    # ---------- migrations ----------

    def _ensure_migrations_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename TEXT PRIMARY KEY,
                sha256 TEXT NOT NULL,
                applied_at_utc TEXT NOT NULL
            )
            """
        )

    def applied(self) -> dict[str, str]:
        with self.session() as conn:
            self._ensure_migrations_table(conn)
            rows = conn.execute("SELECT filename, sha256 FROM schema_migrations ORDER BY filename").fetchall()
        return {r["filename"]: r["sha256"] for r in rows}

    def migration_files(self) -> list[Path]:
        return sorted(self.migrations_dir.glob("*.sql"))

    def pending(self) -> list[str]:
        applied = self.applied()
        return [p.name for p in self.migration_files() if p.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations, each in its own transaction. Returns applied filenames."""
        applied_now: list[str] = []
        with self.session() as conn:
            self._ensure_migrations_table(conn)
            applied = {
                r["filename"]: r["sha256"]
                for r in conn.execute("SELECT filename, sha256 FROM schema_migrations").fetchall()
            }
            for path in self.migration_files():
                sql = path.read_text(encoding="utf-8")
                digest = sha256_text(sql)
                if path.name in applied:
                    if applied[path.name] != digest:
                        self._log.warning("Migration %s changed after it was applied", path.name)
                    continue
                # executescript cannot take parameters, so the bookkeeping row
                # goes in a second statement inside the same transaction
                try:
                    conn.execute("BEGIN IMMEDIATE;")
                    for statement in _split_sql(sql):
                        conn.execute(statement)
                    conn.execute(
                        "INSERT INTO schema_migrations(filename, sha256, applied_at_utc) VALUES (?, ?, ?)",
                        (path.name, digest, utc_now_iso()),
                    )
                    conn.execute("COMMIT;")
                except sqlite3.Error:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK;")
                    self._log.exception("Migration %s failed", path.name)
                    raise
                self._log.info("Applied migration %s", path.name)
                applied_now.append(path.name)
        return applied_now

    def missing_tables(self) -> list[str]:
        with self.session() as conn:
            names = {
                r["name"]
                for r in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
                ).fetchall()
            }
        return [t for t in REQUIRED_TABLES if t not in names]

    def destroy(self) -> None:
        """Remove the database file and its WAL side files."""
        for suffix in ("", "-wal", "-shm"):
            p = Path(f"{self.path}{suffix}")
            if p.exists():
                p.unlink()
        self._log.info("Removed database %s", self.path)


def _split_sql(script: str) -> list[str]:
    """Split a migration script into complete statements (handles trigger bodies)."""
    statements: list[str] = []
    buf = ""
    for line in script.splitlines(keepends=True):
        if not buf and line.strip().startswith("--"):
            continue
        buf += line
        if sqlite3.complete_statement(buf):
            if buf.strip():
                statements.append(buf.strip())
            buf = ""
    if buf.strip():
        statements.append(buf.strip())
    return statements
