# Rev 0.2.0
# teamflow/viewmodels/projects_viewmodel.py
from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from teamflow.errors import TeamflowError
from teamflow.models.types import ProjectStatus, TurnInTime
from teamflow.services.project_service import TURN_IN_TIMES, ProjectService


class ProjectsViewModel(QObject):
    projectsReloaded = Signal(int, list)
    errorRaised = Signal(str)

    def __init__(self, projects: ProjectService):
        super().__init__()
        self._projects = projects
        self._team_id: Optional[int] = None
        self._status: Optional[ProjectStatus] = None
        self._assigned_to_me = True
        self._supervised_by_me = True
        self._turn_in_time: TurnInTime = "ALL"

    @staticmethod
    def status_filter_options() -> List[str]:
        return ["All"] + [s.label for s in ProjectStatus]

    @staticmethod
    def turn_in_time_options() -> List[str]:
        return list(TURN_IN_TIMES)

    # ---- filters
    def set_team(self, team_id: int) -> None:
        self._team_id = team_id

    def set_status_filter(self, status: Optional[str]) -> None:
        try:
            self._status = None if not status or status == "All" else ProjectStatus.parse(status)
        except ValueError as exc:
            # keep the previous filter
            self.errorRaised.emit(str(exc))

    def set_privilege_filter(self, assigned_to_me: bool, supervised_by_me: bool) -> None:
        self._assigned_to_me, self._supervised_by_me = assigned_to_me, supervised_by_me

    def set_turn_in_time_filter(self, turn_in_time: TurnInTime) -> None:
        self._turn_in_time = turn_in_time

    # ---- queries
    def reload(self) -> None:
        if self._team_id is None:
            self.projectsReloaded.emit(0, [])
            return
        try:
            rows = self._projects.list_projects(
                self._team_id,
                status=self._status,
                assigned_to_me=self._assigned_to_me,
                supervised_by_me=self._supervised_by_me,
                turn_in_time=self._turn_in_time,
            )
        except (TeamflowError, ValueError) as exc:
            self.errorRaised.emit(str(exc))
            self.projectsReloaded.emit(0, [])
            return
        out: List[Dict[str, Any]] = [
            {
                "id": p.id,
                "title": p.title,
                "deadline": p.deadline.isoformat(),
                "status": p.status.value,
                "status_label": p.status.label,
            }
            for p in rows
        ]
        self.projectsReloaded.emit(len(out), out)

    # ---- commands
    def create_project(
        self, *, title: str, assignee: str, deadline: date, description: Optional[str] = None
    ) -> Optional[int]:
        if self._team_id is None:
            return None
        try:
            project = self._projects.create_project(title, self._team_id, assignee, deadline, description)
        except (TeamflowError, ValueError) as exc:
            self.errorRaised.emit(str(exc))
            return None
        self.reload()
        return project.id
