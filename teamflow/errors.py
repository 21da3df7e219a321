# Rev 0.2.0
"""Domain errors raised by repositories and services.

View models catch ``TeamflowError`` and surface ``str(exc)`` to the user.
The status workflow does not raise these for refused transitions; it returns
a ``WorkflowResult`` instead.
"""
from __future__ import annotations


class TeamflowError(Exception):
    """Base class for recoverable, user-facing failures."""


class StorageError(TeamflowError):
    """The database could not load or save a record."""


class NoSignedInUserError(TeamflowError):
    def __init__(self) -> None:
        super().__init__("No user is signed in, this functionality is accessible to signed-in users only.")


class InvalidCredentialsError(TeamflowError):
    def __init__(self) -> None:
        super().__init__("Invalid username or password.")


class DuplicateUsernameError(TeamflowError):
    def __init__(self, username: str) -> None:
        super().__init__(f"The username {username!r} is already taken.")
        self.username = username


class UnauthorisedOperationError(TeamflowError):
    def __init__(self, user_id: int, operation: str, target: str) -> None:
        super().__init__(f"User {user_id} is not allowed to {operation} {target}.")
        self.user_id = user_id
        self.operation = operation


class InexistentEntityError(TeamflowError):
    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"The {kind} {key!r} does not exist.")
        self.kind = kind
        self.key = key


class DuplicateProjectTitleError(TeamflowError):
    def __init__(self, title: str, team_name: str) -> None:
        super().__init__(f"A project with title {title!r} already exists in team {team_name!r}.")
        self.title = title


class AlreadyMemberError(TeamflowError):
    def __init__(self, username: str, team_name: str) -> None:
        super().__init__(f"{username} is already a member of team {team_name}.")


class NotATeamMemberError(TeamflowError):
    def __init__(self, username: str, team_name: str) -> None:
        super().__init__(f"{username} is not a member of team {team_name}.")


class ManagerRemovalError(TeamflowError):
    def __init__(self, team_name: str, manager_name: str) -> None:
        super().__init__(f"{manager_name} cannot leave team {team_name} because they are the manager.")
