# Rev 0.2.0
# teamflow – SQLiteTeamRepository
from __future__ import annotations
from typing import Any, Dict, List, Optional

from teamflow.models.entities import Team, User
from .db import SQLiteRepository


class SQLiteTeamRepository(SQLiteRepository):
    """
    Team and membership access.

    Schema expectation:
      teams(id, name, manager_id, code UNIQUE)
      team_members(team_id, user_id)
    """

    @staticmethod
    def _row_to_team(rec: Optional[Dict[str, Any]]) -> Optional[Team]:
        if rec is None:
            return None
        return Team(id=int(rec["id"]), name=rec["name"], manager_id=int(rec["manager_id"]), code=rec["code"])

    # ---------- teams ----------

    def save_team(self, name: str, manager_id: int, code: str) -> int:
        """Inserts the team and registers the manager as its first member."""
        with self._tx() as con:
            cur = con.execute(
                "INSERT INTO teams(name, manager_id, code) VALUES (?, ?, ?)",
                (name, manager_id, code),
            )
            team_id = int(cur.lastrowid)
            con.execute("INSERT INTO team_members(team_id, user_id) VALUES (?, ?)", (team_id, manager_id))
            return team_id

    def get_team(self, team_id: int) -> Optional[Team]:
        return self._row_to_team(
            self._fetch_one("SELECT id, name, manager_id, code FROM teams WHERE id = ?", (team_id,))
        )

    def get_team_by_code(self, code: str) -> Optional[Team]:
        return self._row_to_team(
            self._fetch_one("SELECT id, name, manager_id, code FROM teams WHERE code = ?", (code,))
        )

    def code_exists(self, code: str) -> bool:
        return self._fetch_one("SELECT 1 AS hit FROM teams WHERE code = ?", (code,)) is not None

    def get_teams_of_user(self, user_id: int) -> List[Team]:
        rows = self._fetch_all(
            """
            SELECT t.id, t.name, t.manager_id, t.code
            FROM teams t
            JOIN team_members m ON m.team_id = t.id
            WHERE m.user_id = ?
            ORDER BY t.name COLLATE NOCASE;
            """,
            (user_id,),
        )
        return [self._row_to_team(r) for r in rows]

    def set_new_code(self, team_id: int, code: str) -> None:
        with self._tx() as con:
            con.execute("UPDATE teams SET code = ? WHERE id = ?", (code, team_id))

    def set_manager(self, team_id: int, manager_id: int) -> None:
        with self._tx() as con:
            con.execute("UPDATE teams SET manager_id = ? WHERE id = ?", (manager_id, team_id))

    # ---------- membership ----------

    def join_team(self, user_id: int, team_id: int) -> None:
        with self._tx() as con:
            con.execute("INSERT INTO team_members(team_id, user_id) VALUES (?, ?)", (team_id, user_id))

    def leave_team(self, user_id: int, team_id: int) -> None:
        with self._tx() as con:
            con.execute("DELETE FROM team_members WHERE team_id = ? AND user_id = ?", (team_id, user_id))

    def is_member(self, team_id: int, user_id: int) -> bool:
        row = self._fetch_one(
            "SELECT 1 AS hit FROM team_members WHERE team_id = ? AND user_id = ?",
            (team_id, user_id),
        )
        return row is not None

    def get_members(self, team_id: int) -> List[User]:
        rows = self._fetch_all(
            """
            SELECT u.id, u.username
            FROM users u
            JOIN team_members m ON m.user_id = u.id
            WHERE m.team_id = ?
            ORDER BY u.username COLLATE NOCASE;
            """,
            (team_id,),
        )
        return [User(id=int(r["id"]), username=r["username"]) for r in rows]
