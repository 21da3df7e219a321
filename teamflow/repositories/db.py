# Rev 0.2.0

"""SQLite connection & migration runner (Rev 0.2.0)
- WAL mode, foreign_keys=ON, autocommit connection with explicit transactions
- Applies SQL files in teamflow/migrations in lexical order
- Tracks applied files in schema_migrations(filename, sha256, applied_at_utc)
"""
from __future__ import annotations
import hashlib
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from teamflow.errors import StorageError
from teamflow.utils.logging_setup import get_logger
from teamflow.utils.paths import DB_PATH, MIGRATIONS_DIR


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _sql_literal(value: str) -> str:
    # executescript takes no parameters
    return "'" + value.replace("'", "''") + "'"


@contextmanager
def transaction(conn: sqlite3.Connection, mode: str = "IMMEDIATE") -> Iterator[sqlite3.Connection]:
    """BEGIN/COMMIT around the block; joins an already open transaction."""
    if conn.in_transaction:
        yield conn
        return
    conn.execute(f"BEGIN {mode};")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


class Database:
    def __init__(self, path: Path | str = DB_PATH) -> None:
        self._log = get_logger("Database")
        self.path = Path(path)
        if str(path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.path), isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute("PRAGMA busy_timeout=5000;")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations ("
            " filename TEXT PRIMARY KEY,"
            " sha256 TEXT NOT NULL,"
            " applied_at_utc TEXT NOT NULL)"
        )
        self._log.info("SQLite open %s", self.path)

    def close(self) -> None:
        try:
            self.conn.close()
        except sqlite3.Error:
            self._log.warning("Error while closing %s", self.path, exc_info=True)

    def applied(self) -> Dict[str, str]:
        rows = self.conn.execute("SELECT filename, sha256 FROM schema_migrations").fetchall()
        return {r[0]: r[1] for r in rows}

    def pending(self, migrations_dir: Path = MIGRATIONS_DIR) -> List[str]:
        applied = self.applied()
        return [p.name for p in sorted(Path(migrations_dir).glob("*.sql")) if p.name not in applied]

    def apply_sql(self, sql: str, filename: Optional[str] = None) -> None:
        # executescript commits any open transaction first, so BEGIN/COMMIT go in the script;
        # the schema_migrations row rides in the same transaction as the migration itself
        record = ""
        if filename is not None:
            values = ", ".join(_sql_literal(v) for v in (filename, sha256_text(sql), utc_now_iso()))
            record = f"INSERT INTO schema_migrations(filename, sha256, applied_at_utc) VALUES({values});\n"
        try:
            self.conn.executescript(f"BEGIN;\n{sql}\n{record}COMMIT;")
        except sqlite3.Error:
            if self.conn.in_transaction:
                self.conn.rollback()
            raise

    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        applied = self.applied()
        to_apply: list[Path] = []
        for p in sorted(Path(migrations_dir).glob("*.sql")):
            if p.name not in applied:
                to_apply.append(p)
            elif applied[p.name] != sha256_text(p.read_text(encoding="utf-8")):
                self._log.warning("Migration %s changed after it was applied", p.name)
        for p in to_apply:
            sql = p.read_text(encoding="utf-8")
            self._log.info("Applying migration %s", p.name)
            self.apply_sql(sql, p.name)
        return [p.name for p in to_apply]

    @contextmanager
    def tx(self, mode: str = "IMMEDIATE") -> Iterator[sqlite3.Connection]:
        with transaction(self.conn, mode) as conn:
            yield conn

    def cursor(self) -> sqlite3.Cursor:
        return self.conn.cursor()


class SQLiteRepository:
    """
    Shared plumbing for the SQLite repositories.
    Accepts either a Database wrapper (.conn) or a raw sqlite3.Connection.
    """

    def __init__(self, db_or_conn: Union[Database, sqlite3.Connection, Any]):
        self._db_or_conn = db_or_conn
        self._log = get_logger(type(self).__name__)

    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        if hasattr(self._db_or_conn, "conn") and isinstance(self._db_or_conn.conn, sqlite3.Connection):
            return self._db_or_conn.conn
        raise RuntimeError(
            f"{type(self).__name__}: could not obtain sqlite3.Connection "
            "(expected .conn on wrapper, or a raw Connection)."
        )

    @contextmanager
    def _tx(self) -> Iterator[sqlite3.Connection]:
        try:
            with transaction(self._conn()) as con:
                yield con
        except sqlite3.Error as exc:
            self._log.error("Write failed: %s", exc)
            raise StorageError(str(exc)) from exc

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        try:
            cur = self._conn().execute(sql, params)
            cols = [d[0] for d in cur.description]
            return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]
        except sqlite3.Error as exc:
            self._log.error("Query failed: %s", exc)
            raise StorageError(str(exc)) from exc

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None
