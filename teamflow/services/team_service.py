# Rev 0.2.0
"""Teams, join codes and membership."""
from __future__ import annotations
import secrets
import string
from typing import List

from teamflow.errors import (
    AlreadyMemberError,
    InexistentEntityError,
    ManagerRemovalError,
    NotATeamMemberError,
    UnauthorisedOperationError,
)
from teamflow.models.entities import Team, User
from teamflow.repositories.sqlite_team_repository import SQLiteTeamRepository
from teamflow.utils.logging_setup import get_logger
from .user_service import UserService

CODE_LENGTH = 6
_CODE_ALPHABET = string.ascii_uppercase + string.digits


class TeamService:
    def __init__(self, teams_repo: SQLiteTeamRepository, users: UserService):
        self._teams = teams_repo
        self._users = users
        self._log = get_logger("TeamService")

    # ---- queries

    def get_team(self, team_id: int) -> Team:
        team = self._teams.get_team(team_id)
        if team is None:
            raise InexistentEntityError("team", team_id)
        return team

    def get_members(self, team_id: int) -> List[User]:
        self.get_team(team_id)
        return self._teams.get_members(team_id)

    def is_member(self, team_id: int, user_id: int) -> bool:
        return self._teams.is_member(team_id, user_id)

    def is_manager(self, team_id: int) -> bool:
        user = self._users.current_user()
        return user is not None and self.get_team(team_id).manager_id == user.id

    def teams_of_current_user(self) -> List[Team]:
        return self._teams.get_teams_of_user(self._users.current_user_id())

    # ---- commands

    def create_team(self, name: str) -> Team:
        manager_id = self._users.current_user_id()
        name = (name or "").strip()
        if not name:
            raise ValueError("team name required")
        code = self._new_code()
        team_id = self._teams.save_team(name, manager_id, code)
        self._log.info("Created team %s (id=%s) managed by %s", name, team_id, manager_id)
        return Team(id=team_id, name=name, manager_id=manager_id, code=code)

    def join_team(self, code: str) -> Team:
        user = self._users.require_user()
        team = self._teams.get_team_by_code((code or "").strip().upper())
        if team is None:
            raise InexistentEntityError("team code", code)
        if self._teams.is_member(team.id, user.id):
            raise AlreadyMemberError(user.username, team.name)
        self._teams.join_team(user.id, team.id)
        self._log.info("%s joined team %s", user.username, team.name)
        return team

    def leave_team(self, team_id: int) -> None:
        user = self._users.require_user()
        team = self.get_team(team_id)
        if team.manager_id == user.id:
            raise ManagerRemovalError(team.name, user.username)
        if not self._teams.is_member(team_id, user.id):
            raise NotATeamMemberError(user.username, team.name)
        self._teams.leave_team(user.id, team_id)
        self._log.info("%s left team %s", user.username, team.name)

    def add_member(self, team_id: int, username: str) -> User:
        team = self._require_manager(team_id, "add a member to")
        member = self._users.get_user_by_name(username)
        if self._teams.is_member(team_id, member.id):
            raise AlreadyMemberError(member.username, team.name)
        self._teams.join_team(member.id, team_id)
        self._log.info("Added %s to team %s", member.username, team.name)
        return member

    def remove_member(self, team_id: int, username: str) -> None:
        team = self._require_manager(team_id, "remove a member from")
        member = self._users.get_user_by_name(username)
        if member.id == team.manager_id:
            raise ManagerRemovalError(team.name, member.username)
        if not self._teams.is_member(team_id, member.id):
            raise NotATeamMemberError(member.username, team.name)
        self._teams.leave_team(member.id, team_id)
        self._log.info("Removed %s from team %s", member.username, team.name)

    def regenerate_code(self, team_id: int) -> str:
        self._require_manager(team_id, "change the code of")
        code = self._new_code()
        self._teams.set_new_code(team_id, code)
        return code

    def pass_manager_position(self, team_id: int, username: str) -> None:
        team = self._require_manager(team_id, "pass the manager position of")
        new_manager = self._users.get_user_by_name(username)
        if not self._teams.is_member(team_id, new_manager.id):
            raise NotATeamMemberError(new_manager.username, team.name)
        self._teams.set_manager(team_id, new_manager.id)
        self._log.info("Team %s manager is now %s", team.name, new_manager.username)

    # ---- internals

    def _require_manager(self, team_id: int, operation: str) -> Team:
        user_id = self._users.current_user_id()
        team = self.get_team(team_id)
        if team.manager_id != user_id:
            raise UnauthorisedOperationError(user_id, operation, f"team {team.name}")
        return team

    def _new_code(self) -> str:
        while True:
            code = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if not self._teams.code_exists(code):
                return code
