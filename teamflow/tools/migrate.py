# File: teamflow/tools/migrate.py
# Usage examples:
#   python -m teamflow.tools.migrate up
#   python -m teamflow.tools.migrate status
#   python -m teamflow.tools.migrate rebuild
#   python -m teamflow.tools.migrate up --db /path/to/teamflow.db
#
# Notes:
# - DB path defaults to env TEAMFLOW_DB, then settings.json, then $XDG_DATA_HOME/teamflow/teamflow.db
# - Applies teamflow/migrations/*.sql in lexicographic order
# - Records applied migrations (name + sha256) in schema_migrations

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from teamflow.repositories.db import Database
from teamflow.utils.config import resolve_db_path
from teamflow.utils.logging_setup import get_logger, setup_logging
from teamflow.utils.paths import MIGRATIONS_DIR

log = get_logger("migrate")

REQUIRED_TABLES = [
    "users",
    "teams",
    "team_members",
    "projects",
    "project_statuses",
    "project_status_transitions",
    "project_updates",
    "schema_migrations",
]

EXPECTED_TRIGGERS = [
    "trg_projects_status_validate",
]


def cmd_status(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = db.applied()
        pending = db.pending(migrations_dir)
        print(f"DB: {db_path}")
        print(f"Migrations dir: {migrations_dir}")
        print(f"Applied count: {len(applied)}")
        for name in sorted(applied):
            print(f"  ✔ {name}")
        print(f"Pending count: {len(pending)}")
        for name in pending:
            print(f"  ⧗ {name}")
        return 0
    finally:
        db.close()


def cmd_up(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = db.run_migrations(migrations_dir)
        for name in applied:
            print(f"→ Applied migration: {name}")
        if applied:
            print("✓ Database is up to date.")
        else:
            print("✓ No changes. Database already up to date.")
        return 0
    finally:
        db.close()


def cmd_rebuild(db_path: Path, migrations_dir: Path) -> int:
    # Drop DB file (and WAL side files) and rebuild from migrations
    for p in (db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")):
        if p.exists():
            print(f"⟲ Rebuilding: removing {p}")
            p.unlink()
    db = Database(db_path)
    try:
        db.run_migrations(migrations_dir)
        print("✓ Rebuild complete.")
        return 0
    finally:
        db.close()


def cmd_verify(db_path: Path) -> int:
    db = Database(db_path)
    try:
        names = {
            r[0]
            for r in db.conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%';"
            ).fetchall()
        }
        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        trig = {r[0] for r in db.conn.execute("SELECT name FROM sqlite_master WHERE type='trigger';").fetchall()}
        trig_missing = [t for t in EXPECTED_TRIGGERS if t not in trig]
        if trig_missing:
            print("❌ Missing triggers:", ", ".join(trig_missing))
            return 3

        (mode,) = db.conn.execute("PRAGMA journal_mode;").fetchone()
        if str(mode).lower() != "wal":
            print(f"❌ journal_mode is not WAL (got {mode})")
            return 4

        print("✓ Verification passed.")
        return 0
    finally:
        db.close()


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="teamflow-migrate", description="SQLite migration runner for teamflow")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser, with_migrations: bool = True):
        sp.add_argument("--db", type=Path, default=None, help="Path to SQLite DB (default: TEAMFLOW_DB or XDG data dir)")
        if with_migrations:
            sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    add_common(sub.add_parser("up", help="Run pending migrations"))
    add_common(sub.add_parser("rebuild", help="Drop and recreate DB from migrations"))
    add_common(sub.add_parser("status", help="Show applied and pending migrations"))
    add_common(sub.add_parser("verify", help="Lightweight structural verification"), with_migrations=False)

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging()
    db_path = resolve_db_path(ns.db)
    log.info("migrate %s on %s", ns.cmd, db_path)
    if ns.cmd == "status":
        return cmd_status(db_path, ns.migrations_dir)
    if ns.cmd == "up":
        return cmd_up(db_path, ns.migrations_dir)
    if ns.cmd == "rebuild":
        return cmd_rebuild(db_path, ns.migrations_dir)
    if ns.cmd == "verify":
        return cmd_verify(db_path)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
