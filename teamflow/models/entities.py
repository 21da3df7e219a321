# Rev 0.2.0
"""Lightweight entities aligned with schema 0001/0002"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .types import ProjectStatus


@dataclass
class User:
    id: int | None
    username: str
    password_hash: str = ""


@dataclass
class Team:
    id: int | None
    name: str
    manager_id: int
    code: str


@dataclass
class Project:
    id: int | None
    title: str
    team_id: int
    deadline: date
    supervisor_id: int
    assignee_id: int
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.TO_DO


@dataclass(frozen=True)
class ProjectState:
    """The slice of a project the status workflow decides on."""
    project_id: int
    status: ProjectStatus
    supervisor_id: int
    assignee_id: int


@dataclass
class ProjectUpdate:
    id: int | None
    project_id: int
    updated_at_utc: str
    reason: str
    new_status: ProjectStatus
    old_status: Optional[ProjectStatus] = None
    actor_user_id: Optional[int] = None
    note: Optional[str] = None
