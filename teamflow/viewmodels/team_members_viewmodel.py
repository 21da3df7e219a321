# Rev 0.2.0
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QObject, Signal

from teamflow.errors import TeamflowError
from teamflow.services.team_service import TeamService


class TeamMembersViewModel(QObject):
    """Member list of one team; add/remove are manager-only."""
    membersReloaded = Signal(int, list)
    errorRaised = Signal(str)

    def __init__(self, teams: TeamService):
        super().__init__()
        self._teams = teams
        self._team_id: Optional[int] = None

    def set_team(self, team_id: int) -> None:
        self._team_id = team_id

    def is_manager(self) -> bool:
        if self._team_id is None:
            return False
        try:
            return self._teams.is_manager(self._team_id)
        except TeamflowError:
            return False

    def reload(self) -> None:
        if self._team_id is None:
            self.membersReloaded.emit(0, [])
            return
        try:
            names = [u.username for u in self._teams.get_members(self._team_id)]
        except TeamflowError as exc:
            self.errorRaised.emit(str(exc))
            names = []
        self.membersReloaded.emit(len(names), names)

    def add_member(self, username: str) -> bool:
        return self._run(self._teams.add_member, username)

    def remove_member(self, username: str) -> bool:
        return self._run(self._teams.remove_member, username)

    def _run(self, op, username: str) -> bool:
        if self._team_id is None:
            return False
        try:
            op(self._team_id, username)
        except TeamflowError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.reload()
        return True
