# Rev 0.2.0
# teamflow – SQLiteUserRepository
from __future__ import annotations
from typing import Any, Dict, Optional

from teamflow.models.entities import User
from .db import SQLiteRepository


class SQLiteUserRepository(SQLiteRepository):
    """users(id, username UNIQUE, password_hash)"""

    @staticmethod
    def _row_to_user(rec: Optional[Dict[str, Any]]) -> Optional[User]:
        if rec is None:
            return None
        return User(id=int(rec["id"]), username=rec["username"], password_hash=rec["password_hash"])

    def save_user(self, username: str, password_hash: str) -> int:
        with self._tx() as con:
            cur = con.execute(
                "INSERT INTO users(username, password_hash) VALUES (?, ?)",
                (username, password_hash),
            )
            return int(cur.lastrowid)

    def get_user(self, user_id: int) -> Optional[User]:
        return self._row_to_user(
            self._fetch_one("SELECT id, username, password_hash FROM users WHERE id = ?", (user_id,))
        )

    def get_user_by_name(self, username: str) -> Optional[User]:
        return self._row_to_user(
            self._fetch_one("SELECT id, username, password_hash FROM users WHERE username = ?", (username,))
        )
