# Rev 0.2.0
"""Project creation, editing and listing.

Status changes go through ProjectWorkflow; this service only resolves the
signed-in user before handing the request over.
"""
from __future__ import annotations
from datetime import date, timedelta
from typing import Callable, List, Optional

from teamflow.errors import (
    DuplicateProjectTitleError,
    InexistentEntityError,
    NotATeamMemberError,
    UnauthorisedOperationError,
)
from teamflow.models.entities import Project, ProjectUpdate
from teamflow.models.types import ProjectStatus, TurnInTime
from teamflow.repositories.sqlite_project_repository import SQLiteProjectRepository
from teamflow.repositories.sqlite_project_updates_repository import SQLiteProjectUpdatesRepository
from teamflow.utils.logging_setup import get_logger
from .project_workflow import ProjectWorkflow, WorkflowResult
from .status_rules import AvailableActions
from .team_service import TeamService
from .user_service import UserService

TURN_IN_TIMES: tuple[TurnInTime, ...] = ("ALL", "OVERDUE", "IN_ONE_WEEK", "IN_ONE_MONTH")


class ProjectService:
    def __init__(
        self,
        projects_repo: SQLiteProjectRepository,
        updates_repo: SQLiteProjectUpdatesRepository,
        workflow: ProjectWorkflow,
        teams: TeamService,
        users: UserService,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._projects = projects_repo
        self._updates = updates_repo
        self._workflow = workflow
        self._teams = teams
        self._users = users
        self._today = today
        self._log = get_logger("ProjectService")

    # ---- queries

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_project(project_id)
        if project is None:
            raise InexistentEntityError("project", project_id)
        return project

    def can_edit(self, project_id: int) -> bool:
        """Only the supervisor edits, and never once the project is finished."""
        user = self._users.current_user()
        if user is None:
            return False
        project = self.get_project(project_id)
        return project.supervisor_id == user.id and project.status is not ProjectStatus.FINISHED

    def available_actions(self, project_id: int) -> AvailableActions:
        return self._workflow.available_actions(project_id, self._users.current_user_id())

    def list_projects(
        self,
        team_id: int,
        *,
        status: Optional[ProjectStatus] = None,
        assigned_to_me: bool = True,
        supervised_by_me: bool = True,
        turn_in_time: TurnInTime = "ALL",
    ) -> List[Project]:
        """
        With both privilege flags set the listing holds every project the user
        works on or supervises; with neither it holds every project of the team.
        """
        user_id = self._users.current_user_id()
        if turn_in_time not in TURN_IN_TIMES:
            raise ValueError(f"Unknown turn-in time filter: {turn_in_time!r}")

        today = self._today()
        deadline_from = deadline_to = None
        exclude_status = None
        if turn_in_time == "OVERDUE":
            deadline_to = today - timedelta(days=1)
            exclude_status = ProjectStatus.FINISHED
        elif turn_in_time == "IN_ONE_WEEK":
            deadline_from, deadline_to = today, today + timedelta(days=7)
        elif turn_in_time == "IN_ONE_MONTH":
            deadline_from, deadline_to = today, today + timedelta(days=30)

        return self._projects.list_projects_of_team(
            team_id,
            status=status,
            assignee_id=user_id if assigned_to_me else None,
            supervisor_id=user_id if supervised_by_me else None,
            deadline_from=deadline_from,
            deadline_to=deadline_to,
            exclude_status=exclude_status,
        )

    def history(self, project_id: int) -> List[ProjectUpdate]:
        self.get_project(project_id)
        return self._updates.list_updates_for_project(project_id)

    # ---- commands

    def create_project(
        self,
        title: str,
        team_id: int,
        assignee_name: str,
        deadline: date,
        description: Optional[str] = None,
    ) -> Project:
        supervisor = self._users.require_user()
        team = self._teams.get_team(team_id)
        if not self._teams.is_member(team_id, supervisor.id):
            raise UnauthorisedOperationError(supervisor.id, "create a project in", f"team {team.name}")
        title = self._clean_title(title)
        assignee = self._member_by_name(team_id, team.name, assignee_name)
        if self._projects.get_project_by_title(team_id, title) is not None:
            raise DuplicateProjectTitleError(title, team.name)

        project = Project(
            id=None,
            title=title,
            team_id=team_id,
            deadline=deadline,
            supervisor_id=supervisor.id,
            assignee_id=assignee.id,
            description=description or None,
        )
        project.id = self._projects.save_project(project, actor_user_id=supervisor.id)
        self._log.info("Created project %s (id=%s) in team %s", title, project.id, team.name)
        return project

    def update_project(
        self,
        project_id: int,
        title: str,
        assignee_name: str,
        supervisor_name: str,
        deadline: date,
        description: Optional[str] = None,
    ) -> Project:
        user_id = self._users.current_user_id()
        project = self.get_project(project_id)
        if project.supervisor_id != user_id or project.status is ProjectStatus.FINISHED:
            raise UnauthorisedOperationError(user_id, "edit", f"project {project.title}")

        team = self._teams.get_team(project.team_id)
        title = self._clean_title(title)
        assignee = self._member_by_name(team.id, team.name, assignee_name)
        supervisor = self._member_by_name(team.id, team.name, supervisor_name)
        clash = self._projects.get_project_by_title(team.id, title)
        if clash is not None and clash.id != project_id:
            raise DuplicateProjectTitleError(title, team.name)

        self._projects.update_project_fields(
            project_id,
            title=title,
            description=description or None,
            deadline=deadline,
            supervisor_id=supervisor.id,
            assignee_id=assignee.id,
        )
        self._log.info("Updated project %s (id=%s)", title, project_id)
        return self.get_project(project_id)

    def change_status(
        self, project_id: int, target_status: ProjectStatus | str, *, note: Optional[str] = None
    ) -> WorkflowResult:
        return self._workflow.request_status_change(
            project_id, self._users.current_user_id(), target_status, note=note
        )

    # ---- internals

    @staticmethod
    def _clean_title(title: str) -> str:
        title = (title or "").strip()
        if not title:
            raise ValueError("title required")
        return title

    def _member_by_name(self, team_id: int, team_name: str, username: str):
        user = self._users.get_user_by_name(username)
        if not self._teams.is_member(team_id, user.id):
            raise NotATeamMemberError(user.username, team_name)
        return user
