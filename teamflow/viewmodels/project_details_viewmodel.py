# Rev 0.2.0 — status actions + history for a single project
from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from teamflow.errors import TeamflowError
from teamflow.models.types import ProjectStatus
from teamflow.services.project_service import ProjectService
from teamflow.services.user_service import UserService
from teamflow.utils.logging_setup import get_logger


class ProjectDetailsViewModel(QObject):
    """
    Emits:
      loaded({
        "id": int, "title": str, "description": str|None, "deadline": "YYYY-MM-DD",
        "status": str, "status_label": str, "team_id": int,
        "supervisor": str, "assignee": str,
        "is_supervisor": bool, "is_assignee": bool, "can_edit": bool,
      })
      statusActionsChanged(to_do, in_progress, turned_in, finished)
      statusChanged(status_label)
      errorRaised(message)
      saved(project_id)
      historyLoaded(project_id, [dict, ...])
    """
    loaded = Signal(dict)
    statusActionsChanged = Signal(bool, bool, bool, bool)
    statusChanged = Signal(str)
    errorRaised = Signal(str)
    saved = Signal(int)
    historyLoaded = Signal(int, list)

    def __init__(self, projects: ProjectService, users: UserService):
        super().__init__()
        self._projects = projects
        self._users = users
        self._project_id: Optional[int] = None
        self._last: Optional[Dict[str, Any]] = None
        self._log = get_logger("ProjectDetailsViewModel")

    # ---- queries
    def load(self, project_id: int) -> None:
        self._project_id = project_id
        self.reload()

    def reload(self) -> None:
        if self._project_id is None:
            return
        try:
            proj = self._projects.get_project(self._project_id)
            me = self._users.current_user()
            info = {
                "id": int(proj.id),
                "title": proj.title,
                "description": proj.description,
                "deadline": proj.deadline.isoformat(),
                "status": proj.status.value,
                "status_label": proj.status.label,
                "team_id": proj.team_id,
                "supervisor": self._users.get_user(proj.supervisor_id).username,
                "assignee": self._users.get_user(proj.assignee_id).username,
                "is_supervisor": me is not None and me.id == proj.supervisor_id,
                "is_assignee": me is not None and me.id == proj.assignee_id,
                "can_edit": self._projects.can_edit(proj.id),
            }
        except TeamflowError as exc:
            self._last = None
            self.errorRaised.emit(str(exc))
            return
        self._last = info
        self.loaded.emit(info)
        self._emit_actions()

    def last(self) -> Optional[Dict[str, Any]]:
        return self._last

    def can_edit(self) -> bool:
        return bool(self._last and self._last["can_edit"])

    # ---- commands
    def set_project_status(self, new_status: ProjectStatus | str, note: Optional[str] = None) -> bool:
        if self._project_id is None:
            return False
        try:
            result = self._projects.change_status(self._project_id, new_status, note=note)
        except (TeamflowError, ValueError) as exc:
            self.errorRaised.emit(str(exc))
            return False
        if result.ok:
            self.reload()
            self.statusChanged.emit(result.status.label)
        else:
            self._log.debug("Status change refused (%s): %s", result.code, result.message)
            self.errorRaised.emit(result.message)
            self._emit_actions()
        return result.ok

    def save_project(
        self,
        *,
        title: str,
        assignee: str,
        supervisor: str,
        deadline: date,
        description: Optional[str] = None,
    ) -> bool:
        if self._project_id is None:
            return False
        try:
            self._projects.update_project(self._project_id, title, assignee, supervisor, deadline, description)
        except (TeamflowError, ValueError) as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.reload()
        self.saved.emit(self._project_id)
        return True

    def load_history(self) -> None:
        if self._project_id is None:
            return
        try:
            updates = self._projects.history(self._project_id)
        except TeamflowError as exc:
            self.errorRaised.emit(str(exc))
            return
        self.historyLoaded.emit(self._project_id, self._decorate(updates))

    # ---- internals
    def _emit_actions(self) -> None:
        try:
            actions = self._projects.available_actions(self._project_id)
        except TeamflowError:
            # no session or project gone: nothing is actionable
            self.statusActionsChanged.emit(False, False, False, False)
            return
        self.statusActionsChanged.emit(*actions.as_tuple())

    def _decorate(self, updates) -> List[Dict[str, Any]]:
        names: Dict[int, str] = {}
        out: List[Dict[str, Any]] = []
        for u in updates:
            actor = None
            if u.actor_user_id is not None:
                if u.actor_user_id not in names:
                    try:
                        names[u.actor_user_id] = self._users.get_user(u.actor_user_id).username
                    except TeamflowError:
                        names[u.actor_user_id] = str(u.actor_user_id)
                actor = names[u.actor_user_id]
            out.append({
                "id": u.id,
                "updated_at_utc": u.updated_at_utc,
                "reason": u.reason,
                "note": u.note,
                "actor": actor,
                "old_status": u.old_status.label if u.old_status else None,
                "new_status": u.new_status.label,
            })
        return out
