# Rev 0.2.0
# teamflow – SQLiteProjectRepository (aligned with schema 0001/0002)
from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional

from teamflow.models.entities import Project, ProjectState
from teamflow.models.types import ProjectStatus
from .db import SQLiteRepository

_PROJECT_COLUMNS = """
    p.id,
    p.team_id,
    p.title,
    p.description,
    p.deadline,
    p.status_id,
    p.supervisor_id,
    p.assignee_id
"""


class SQLiteProjectRepository(SQLiteRepository):
    """
    Project repository.
    Also the persistence side of the status workflow: every status write is a
    compare-and-set on status_id and is mirrored into project_updates.
    """

    @staticmethod
    def _row_to_project(rec: Optional[Dict[str, Any]]) -> Optional[Project]:
        if rec is None:
            return None
        return Project(
            id=int(rec["id"]),
            title=rec["title"],
            team_id=int(rec["team_id"]),
            deadline=date.fromisoformat(rec["deadline"]),
            supervisor_id=int(rec["supervisor_id"]),
            assignee_id=int(rec["assignee_id"]),
            description=rec["description"],
            status=ProjectStatus.from_id(rec["status_id"]),
        )

    # ---------- CRUD ----------

    def save_project(self, project: Project, *, actor_user_id: Optional[int] = None) -> int:
        with self._tx() as con:
            cur = con.execute(
                """
                INSERT INTO projects(team_id, title, description, deadline, status_id,
                                     supervisor_id, assignee_id, created_at_utc, updated_at_utc)
                VALUES (?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))
                """,
                (
                    project.team_id,
                    project.title,
                    project.description,
                    project.deadline.isoformat(),
                    project.status.status_id,
                    project.supervisor_id,
                    project.assignee_id,
                ),
            )
            project_id = int(cur.lastrowid)
            # mirror create entry into project_updates
            con.execute(
                """
                INSERT INTO project_updates(project_id, updated_at_utc, actor_user_id, reason,
                                            note, old_status_id, new_status_id)
                VALUES (?, datetime('now'), ?, 'create', NULL, NULL, ?)
                """,
                (project_id, actor_user_id, project.status.status_id),
            )
            return project_id

    def get_project(self, project_id: int) -> Optional[Project]:
        return self._row_to_project(
            self._fetch_one(f"SELECT {_PROJECT_COLUMNS} FROM projects p WHERE p.id = ?", (project_id,))
        )

    def get_project_by_title(self, team_id: int, title: str) -> Optional[Project]:
        return self._row_to_project(
            self._fetch_one(
                f"SELECT {_PROJECT_COLUMNS} FROM projects p WHERE p.team_id = ? AND p.title = ?",
                (team_id, title),
            )
        )

    def update_project_fields(
        self,
        project_id: int,
        *,
        title: str,
        description: Optional[str],
        deadline: date,
        supervisor_id: int,
        assignee_id: int,
    ) -> bool:
        with self._tx() as con:
            cur = con.execute(
                """
                UPDATE projects
                SET title = ?, description = ?, deadline = ?, supervisor_id = ?, assignee_id = ?,
                    updated_at_utc = datetime('now')
                WHERE id = ?
                """,
                (title, description, deadline.isoformat(), supervisor_id, assignee_id, project_id),
            )
            return cur.rowcount > 0

    def list_projects_of_team(
        self,
        team_id: int,
        *,
        status: Optional[ProjectStatus] = None,
        assignee_id: Optional[int] = None,
        supervisor_id: Optional[int] = None,
        deadline_from: Optional[date] = None,
        deadline_to: Optional[date] = None,
        exclude_status: Optional[ProjectStatus] = None,
    ) -> List[Project]:
        """
        Filtered listing. assignee_id and supervisor_id are OR-ed when both are
        given; deadline bounds are inclusive ISO dates.
        """
        where, params = ["p.team_id = ?"], [team_id]
        if status is not None:
            where.append("p.status_id = ?")
            params.append(status.status_id)
        if exclude_status is not None:
            where.append("p.status_id <> ?")
            params.append(exclude_status.status_id)
        if assignee_id is not None and supervisor_id is not None:
            where.append("(p.assignee_id = ? OR p.supervisor_id = ?)")
            params.extend([assignee_id, supervisor_id])
        elif assignee_id is not None:
            where.append("p.assignee_id = ?")
            params.append(assignee_id)
        elif supervisor_id is not None:
            where.append("p.supervisor_id = ?")
            params.append(supervisor_id)
        if deadline_from is not None:
            where.append("p.deadline >= ?")
            params.append(deadline_from.isoformat())
        if deadline_to is not None:
            where.append("p.deadline <= ?")
            params.append(deadline_to.isoformat())

        sql = f"""
            SELECT {_PROJECT_COLUMNS}
            FROM projects p
            WHERE {' AND '.join(where)}
            ORDER BY p.deadline ASC, p.id ASC;
        """
        return [self._row_to_project(r) for r in self._fetch_all(sql, tuple(params))]

    # ---------- status workflow persistence ----------

    def get_project_state(self, project_id: int) -> Optional[ProjectState]:
        rec = self._fetch_one(
            "SELECT id, status_id, supervisor_id, assignee_id FROM projects WHERE id = ?",
            (project_id,),
        )
        if rec is None:
            return None
        return ProjectState(
            project_id=int(rec["id"]),
            status=ProjectStatus.from_id(rec["status_id"]),
            supervisor_id=int(rec["supervisor_id"]),
            assignee_id=int(rec["assignee_id"]),
        )

    def set_project_status(
        self,
        project_id: int,
        old_status: ProjectStatus,
        new_status: ProjectStatus,
        *,
        actor_user_id: Optional[int] = None,
        reason: str = "status_change",
        note: Optional[str] = None,
    ) -> bool:
        """Returns False when the stored status is no longer old_status."""
        with self._tx() as con:
            cur = con.execute(
                """
                UPDATE projects
                SET status_id = ?, updated_at_utc = datetime('now')
                WHERE id = ? AND status_id = ?
                """,
                (new_status.status_id, project_id, old_status.status_id),
            )
            if cur.rowcount == 0:
                return False
            con.execute(
                """
                INSERT INTO project_updates(project_id, updated_at_utc, actor_user_id, reason,
                                            note, old_status_id, new_status_id)
                VALUES (?, datetime('now'), ?, ?, ?, ?, ?)
                """,
                (project_id, actor_user_id, reason, note, old_status.status_id, new_status.status_id),
            )
            return True
