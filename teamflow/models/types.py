# teamflow type definitions
# Rev 0.2.0

from __future__ import annotations
from enum import Enum
from typing import Literal

# Roles are relative to a single project, never global
Role = Literal["supervisor", "assignee"]

# Deadline buckets offered by the project filter
TurnInTime = Literal["ALL", "OVERDUE", "IN_ONE_WEEK", "IN_ONE_MONTH"]

WorkflowCode = Literal["applied", "unauthorized", "illegal_transition", "storage_failure"]


class ProjectStatus(str, Enum):
    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    TURNED_IN = "TURNED_IN"
    FINISHED = "FINISHED"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def status_id(self) -> int:
        # Matches the ids seeded into project_statuses
        return _IDS[self]

    @classmethod
    def from_id(cls, status_id: int) -> "ProjectStatus":
        for status, sid in _IDS.items():
            if sid == int(status_id):
                return status
        raise ValueError(f"Unknown project status id: {status_id}")

    @classmethod
    def parse(cls, value: "ProjectStatus | str") -> "ProjectStatus":
        """Accept an enum member, its name, or its label ("Turned In")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        norm = text.upper().replace(" ", "_")
        if norm in cls.__members__:
            return cls[norm]
        for status, label in _LABELS.items():
            if label.lower() == text.lower():
                return status
        raise ValueError(f"Unknown project status: {value!r}")

    def __str__(self) -> str:
        return self.value


_LABELS = {
    ProjectStatus.TO_DO: "To Do",
    ProjectStatus.IN_PROGRESS: "In Progress",
    ProjectStatus.TURNED_IN: "Turned In",
    ProjectStatus.FINISHED: "Finished",
}

_IDS = {
    ProjectStatus.TO_DO: 1,
    ProjectStatus.IN_PROGRESS: 2,
    ProjectStatus.TURNED_IN: 3,
    ProjectStatus.FINISHED: 4,
}
