# teamflow/services/status_rules.py
"""Project status transition table, keyed by the requester's role."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from teamflow.models.types import ProjectStatus, Role

S = ProjectStatus

TRANSITIONS: Mapping[Role, Mapping[ProjectStatus, FrozenSet[ProjectStatus]]] = {
    "supervisor": {
        S.TO_DO: frozenset(),
        S.IN_PROGRESS: frozenset(),
        S.TURNED_IN: frozenset({S.FINISHED, S.IN_PROGRESS, S.TO_DO}),
        S.FINISHED: frozenset(),
    },
    "assignee": {
        S.TO_DO: frozenset({S.IN_PROGRESS, S.TURNED_IN}),
        S.IN_PROGRESS: frozenset({S.TO_DO, S.TURNED_IN}),
        S.TURNED_IN: frozenset({S.IN_PROGRESS, S.TO_DO}),
        S.FINISHED: frozenset(),
    },
}

ROLES: tuple[Role, ...] = ("supervisor", "assignee")


@dataclass(frozen=True)
class AvailableActions:
    to_do: bool = False
    in_progress: bool = False
    turned_in: bool = False
    finished: bool = False

    @classmethod
    def from_targets(cls, targets: Iterable[ProjectStatus]) -> "AvailableActions":
        t = set(targets)
        return cls(
            to_do=S.TO_DO in t,
            in_progress=S.IN_PROGRESS in t,
            turned_in=S.TURNED_IN in t,
            finished=S.FINISHED in t,
        )

    def as_dict(self) -> Dict[str, bool]:
        return {
            "toDo": self.to_do,
            "inProgress": self.in_progress,
            "turnedIn": self.turned_in,
            "finished": self.finished,
        }

    def as_tuple(self) -> tuple[bool, bool, bool, bool]:
        return (self.to_do, self.in_progress, self.turned_in, self.finished)


def roles_of(user_id: int, supervisor_id: int, assignee_id: int) -> FrozenSet[Role]:
    roles = set()
    if user_id == supervisor_id:
        roles.add("supervisor")
    if user_id == assignee_id:
        roles.add("assignee")
    return frozenset(roles)


def allowed_targets(current: ProjectStatus, roles: Iterable[Role]) -> FrozenSet[ProjectStatus]:
    """Union over the given roles; empty for no role and for FINISHED."""
    out: set[ProjectStatus] = set()
    for role in roles:
        out |= TRANSITIONS[role][current]
    return frozenset(out)


def is_reachable(current: ProjectStatus, target: ProjectStatus) -> bool:
    """True if any role may move current -> target."""
    return target in allowed_targets(current, ROLES)


def required_role(current: ProjectStatus, target: ProjectStatus) -> Optional[Role]:
    """The first role allowed to make the move, or None when no role is."""
    for role in ROLES:
        if target in TRANSITIONS[role][current]:
            return role
    return None


def available_actions(current: ProjectStatus, roles: Iterable[Role]) -> AvailableActions:
    return AvailableActions.from_targets(allowed_targets(current, roles))
