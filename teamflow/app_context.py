# teamflow application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .utils.config import resolve_db_path
from .utils.logging_setup import get_logger
from .repositories.db import Database
from .repositories.sqlite_project_repository import SQLiteProjectRepository
from .repositories.sqlite_project_updates_repository import SQLiteProjectUpdatesRepository
from .repositories.sqlite_team_repository import SQLiteTeamRepository
from .repositories.sqlite_user_repository import SQLiteUserRepository
from .services.project_service import ProjectService
from .services.project_workflow import ProjectWorkflow
from .services.team_service import TeamService
from .services.user_service import UserService


@dataclass
class AppContext:
    """Central container for shared app resources. Built once, passed by reference."""
    db_path: Path
    db: Database
    users: UserService
    teams: TeamService
    workflow: ProjectWorkflow
    projects: ProjectService

    @classmethod
    def create(cls, db_path: Optional[str | Path] = None, *, migrate: bool = True) -> "AppContext":
        """Open the DB, apply pending migrations and wire repositories into services."""
        log = get_logger("AppContext")
        path = resolve_db_path(db_path)
        db = Database(path)
        if migrate:
            applied = db.run_migrations()
            if applied:
                log.info("Applied migrations: %s", ", ".join(applied))

        project_repo = SQLiteProjectRepository(db)
        users = UserService(SQLiteUserRepository(db))
        teams = TeamService(SQLiteTeamRepository(db), users)
        workflow = ProjectWorkflow(project_repo)
        projects = ProjectService(
            project_repo,
            SQLiteProjectUpdatesRepository(db),
            workflow,
            teams,
            users,
        )
        log.info("AppContext initialized with DB=%s", path)
        return cls(db_path=path, db=db, users=users, teams=teams, workflow=workflow, projects=projects)

    def close(self) -> None:
        self.db.close()
