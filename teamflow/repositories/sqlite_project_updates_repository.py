# Rev 0.2.0
from __future__ import annotations

from typing import Any, Dict, List

from teamflow.models.entities import ProjectUpdate
from teamflow.models.types import ProjectStatus
from .db import SQLiteRepository


class SQLiteProjectUpdatesRepository(SQLiteRepository):
    """
    Read-only access to the project timeline. Rows are appended by
    SQLiteProjectRepository in the same transaction as the change they record.

    Schema expectation:

      project_updates(
        id INTEGER PRIMARY KEY,
        project_id INTEGER NOT NULL,
        updated_at_utc TEXT NOT NULL,
        actor_user_id INTEGER NULL,
        reason TEXT NOT NULL,
        note TEXT NULL,
        old_status_id INTEGER NULL,
        new_status_id INTEGER NOT NULL
      )
    """

    @staticmethod
    def _row_to_update(rec: Dict[str, Any]) -> ProjectUpdate:
        old = rec["old_status_id"]
        return ProjectUpdate(
            id=int(rec["id"]),
            project_id=int(rec["project_id"]),
            updated_at_utc=rec["updated_at_utc"],
            reason=rec["reason"],
            new_status=ProjectStatus.from_id(rec["new_status_id"]),
            old_status=ProjectStatus.from_id(old) if old is not None else None,
            actor_user_id=rec["actor_user_id"],
            note=rec["note"],
        )

    def list_updates_for_project(
        self,
        project_id: int,
        *,
        limit: int = 200,
        offset: int = 0,
        order_desc: bool = True,
    ) -> List[ProjectUpdate]:
        order = "DESC" if order_desc else "ASC"
        rows = self._fetch_all(
            f"""
            SELECT id, project_id, updated_at_utc, actor_user_id, reason, note,
                   old_status_id, new_status_id
            FROM project_updates
            WHERE project_id = ?
            ORDER BY updated_at_utc {order}, id {order}
            LIMIT ? OFFSET ?;
            """,
            (project_id, limit, offset),
        )
        return [self._row_to_update(r) for r in rows]
