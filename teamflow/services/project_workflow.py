# Rev 0.2.0

"""Project status workflow (Rev 0.2.0)
Decides whether a requester may move a project to a target status, applies
the move through the repository and reports a tagged result.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Optional, Protocol

from teamflow.errors import InexistentEntityError, StorageError
from teamflow.models.entities import ProjectState
from teamflow.models.types import ProjectStatus, Role, WorkflowCode
from teamflow.utils.logging_setup import get_logger
from . import status_rules
from .status_rules import AvailableActions

S = ProjectStatus


class ProjectStatusRepository(Protocol):
    def get_project_state(self, project_id: int) -> Optional[ProjectState]: ...

    def set_project_status(
        self,
        project_id: int,
        old_status: ProjectStatus,
        new_status: ProjectStatus,
        *,
        actor_user_id: Optional[int] = None,
        reason: str = "status_change",
        note: Optional[str] = None,
    ) -> bool: ...


@dataclass(frozen=True)
class WorkflowResult:
    ok: bool
    code: WorkflowCode
    message: str
    project_id: int
    to_status: ProjectStatus
    from_status: Optional[ProjectStatus] = None
    # Status the project holds after the call
    status: Optional[ProjectStatus] = None
    required_role: Optional[Role] = None

    @property
    def is_unauthorized(self) -> bool:
        return self.code == "unauthorized"

    @property
    def is_illegal_transition(self) -> bool:
        return self.code == "illegal_transition"

    @property
    def is_storage_failure(self) -> bool:
        return self.code == "storage_failure"


def _unauthorized_message(project_id: int, roles: FrozenSet[Role], required: Optional[Role], target: ProjectStatus) -> str:
    if not roles:
        return f"You are neither the supervisor nor the assignee of project {project_id}."
    if required == "supervisor":
        return "Only the supervisor can set the project as finished."
    if target is S.TO_DO:
        return "Only the assignee can set the project back to To Do."
    return "Only the assignee can set the project as in progress or turn in the project."


def _reason(current: ProjectStatus, target: ProjectStatus, roles: FrozenSet[Role]) -> str:
    if target is S.FINISHED:
        return "accept_turn_in"
    if current is S.TURNED_IN:
        # both roles may pull a turn-in back; the supervisor's pull is a rejection
        return "discard_turn_in" if "supervisor" in roles else "undo_turn_in"
    return {
        S.IN_PROGRESS: "start",
        S.TURNED_IN: "turn_in",
        S.TO_DO: "set_to_do",
    }[target]


class ProjectWorkflow:
    """
    Status state machine plus its role guard.

    The repository is re-read on every call; writes are compare-and-set on the
    previously read status and are retried once when the row moved underneath.
    """

    def __init__(self, repo: ProjectStatusRepository):
        self._repo = repo
        self._log = get_logger("ProjectWorkflow")

    # ---- queries

    def available_actions(self, project_id: int, requesting_user_id: int) -> AvailableActions:
        state = self._repo.get_project_state(project_id)
        if state is None:
            raise InexistentEntityError("project", project_id)
        return self.actions_for(state, requesting_user_id)

    @staticmethod
    def actions_for(state: ProjectState, requesting_user_id: int) -> AvailableActions:
        roles = status_rules.roles_of(requesting_user_id, state.supervisor_id, state.assignee_id)
        return status_rules.available_actions(state.status, roles)

    # ---- commands

    def request_status_change(
        self,
        project_id: int,
        requesting_user_id: int,
        target_status: ProjectStatus | str,
        *,
        note: Optional[str] = None,
    ) -> WorkflowResult:
        target = ProjectStatus.parse(target_status)

        for attempt in (1, 2):
            try:
                state = self._repo.get_project_state(project_id)
            except StorageError as exc:
                return self._storage_failure(project_id, target, None, str(exc))
            if state is None:
                return self._storage_failure(project_id, target, None, f"Project {project_id} could not be found.")

            refused = self._check(state, requesting_user_id, target)
            if refused is not None:
                self._log.warning(
                    "Refused status change project=%s user=%s %s->%s: %s",
                    project_id, requesting_user_id, state.status, target, refused.code,
                )
                return refused

            roles = status_rules.roles_of(requesting_user_id, state.supervisor_id, state.assignee_id)
            try:
                written = self._repo.set_project_status(
                    project_id,
                    state.status,
                    target,
                    actor_user_id=requesting_user_id,
                    reason=_reason(state.status, target, roles),
                    note=note,
                )
            except StorageError as exc:
                return self._storage_failure(project_id, target, state.status, str(exc))

            if written:
                self._log.info(
                    "Project %s status %s -> %s by user %s", project_id, state.status, target, requesting_user_id
                )
                return WorkflowResult(
                    ok=True,
                    code="applied",
                    message=f"The project was set to {target.label}.",
                    project_id=project_id,
                    from_status=state.status,
                    to_status=target,
                    status=target,
                )
            self._log.warning("Project %s changed during status write (attempt %d)", project_id, attempt)

        return self._storage_failure(
            project_id, target, state.status, f"Project {project_id} was modified concurrently, please retry."
        )

    # ---- internals

    def _check(self, state: ProjectState, user_id: int, target: ProjectStatus) -> Optional[WorkflowResult]:
        roles = status_rules.roles_of(user_id, state.supervisor_id, state.assignee_id)
        current = state.status

        if not roles:
            return WorkflowResult(
                ok=False,
                code="unauthorized",
                message=_unauthorized_message(state.project_id, roles, None, target),
                project_id=state.project_id,
                from_status=current,
                to_status=target,
                status=current,
                required_role=status_rules.required_role(current, target),
            )
        if target in status_rules.allowed_targets(current, roles):
            return None
        if status_rules.is_reachable(current, target):
            required = status_rules.required_role(current, target)
            return WorkflowResult(
                ok=False,
                code="unauthorized",
                message=_unauthorized_message(state.project_id, roles, required, target),
                project_id=state.project_id,
                from_status=current,
                to_status=target,
                status=current,
                required_role=required,
            )
        return WorkflowResult(
            ok=False,
            code="illegal_transition",
            message=f"You cannot set the project from status {current.label} to {target.label}.",
            project_id=state.project_id,
            from_status=current,
            to_status=target,
            status=current,
        )

    def _storage_failure(
        self, project_id: int, target: ProjectStatus, current: Optional[ProjectStatus], message: str
    ) -> WorkflowResult:
        self._log.error("Status change for project %s failed: %s", project_id, message)
        return WorkflowResult(
            ok=False,
            code="storage_failure",
            message=message,
            project_id=project_id,
            from_status=current,
            to_status=target,
            status=current,
        )
