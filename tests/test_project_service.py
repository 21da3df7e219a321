# tests/test_project_service.py
from __future__ import annotations

from datetime import date, timedelta

import pytest

from teamflow.errors import (
    DuplicateProjectTitleError,
    NotATeamMemberError,
    UnauthorisedOperationError,
)
from teamflow.models.types import ProjectStatus

from conftest import sign_in_as

S = ProjectStatus
TODAY = date.today()


def _finish(ctx, project_id: int, supervisor: str, assignee: str) -> None:
    sign_in_as(ctx, assignee)
    assert ctx.projects.change_status(project_id, S.TURNED_IN).ok
    sign_in_as(ctx, supervisor)
    assert ctx.projects.change_status(project_id, S.FINISHED).ok


def test_create_project_defaults(ctx, team):
    p = ctx.projects.create_project("  Website  ", team.id, "bob", TODAY, description="")
    stored = ctx.projects.get_project(p.id)
    assert stored.title == "Website"
    assert stored.status is S.TO_DO
    assert stored.description is None
    assert stored.supervisor_id == ctx.users.get_user_by_name("alice").id
    assert stored.assignee_id == ctx.users.get_user_by_name("bob").id
    assert stored.deadline == TODAY


def test_title_unique_per_team(ctx, team):
    ctx.projects.create_project("Website", team.id, "bob", TODAY)
    with pytest.raises(DuplicateProjectTitleError):
        ctx.projects.create_project("Website", team.id, "carol", TODAY)

    # another team may reuse it
    other = ctx.teams.create_team("Other")
    ctx.projects.create_project("Website", other.id, "alice", TODAY)


def test_assignee_must_be_member(ctx, team):
    with pytest.raises(NotATeamMemberError):
        ctx.projects.create_project("Website", team.id, "dave", TODAY)


def test_outsider_cannot_create(ctx, team):
    sign_in_as(ctx, "dave")
    with pytest.raises(UnauthorisedOperationError):
        ctx.projects.create_project("Website", team.id, "bob", TODAY)


def test_empty_title_rejected(ctx, team):
    with pytest.raises(ValueError):
        ctx.projects.create_project("   ", team.id, "bob", TODAY)


def test_only_supervisor_edits(ctx, team):
    p = ctx.projects.create_project("Website", team.id, "bob", TODAY)
    assert ctx.projects.can_edit(p.id)
    updated = ctx.projects.update_project(p.id, "Web site", "carol", "alice", TODAY + timedelta(days=3), "v2")
    assert (updated.title, updated.description) == ("Web site", "v2")
    assert updated.assignee_id == ctx.users.get_user_by_name("carol").id

    sign_in_as(ctx, "carol")
    assert not ctx.projects.can_edit(p.id)
    with pytest.raises(UnauthorisedOperationError):
        ctx.projects.update_project(p.id, "Hijack", "carol", "carol", TODAY)


def test_update_keeps_own_title_but_rejects_clash(ctx, team):
    a = ctx.projects.create_project("A", team.id, "bob", TODAY)
    ctx.projects.create_project("B", team.id, "bob", TODAY)
    ctx.projects.update_project(a.id, "A", "bob", "alice", TODAY, "same title")
    with pytest.raises(DuplicateProjectTitleError):
        ctx.projects.update_project(a.id, "B", "bob", "alice", TODAY)


def test_update_supervisor_must_be_member(ctx, team):
    p = ctx.projects.create_project("Website", team.id, "bob", TODAY)
    with pytest.raises(NotATeamMemberError):
        ctx.projects.update_project(p.id, "Website", "bob", "dave", TODAY)


def test_finished_project_is_read_only(ctx, team):
    p = ctx.projects.create_project("Website", team.id, "bob", TODAY)
    _finish(ctx, p.id, "alice", "bob")
    assert not ctx.projects.can_edit(p.id)
    with pytest.raises(UnauthorisedOperationError):
        ctx.projects.update_project(p.id, "Website 2", "bob", "alice", TODAY)


def test_list_by_privilege(ctx, team):
    mine = ctx.projects.create_project("Supervised by alice", team.id, "bob", TODAY)
    sign_in_as(ctx, "bob")
    theirs = ctx.projects.create_project("Assigned to alice", team.id, "alice", TODAY)
    ctx.projects.create_project("Unrelated", team.id, "carol", TODAY)
    sign_in_as(ctx, "alice")

    def titles(**kw):
        return sorted(p.title for p in ctx.projects.list_projects(team.id, **kw))

    assert titles() == sorted([mine.title, theirs.title])
    assert titles(assigned_to_me=True, supervised_by_me=False) == [theirs.title]
    assert titles(assigned_to_me=False, supervised_by_me=True) == [mine.title]
    assert titles(assigned_to_me=False, supervised_by_me=False) == sorted(
        [mine.title, theirs.title, "Unrelated"]
    )


def test_list_by_status(ctx, team):
    a = ctx.projects.create_project("A", team.id, "bob", TODAY)
    ctx.projects.create_project("B", team.id, "bob", TODAY)
    sign_in_as(ctx, "bob")
    ctx.projects.change_status(a.id, S.IN_PROGRESS)
    listed = ctx.projects.list_projects(team.id, status=S.IN_PROGRESS)
    assert [p.title for p in listed] == ["A"]


def test_list_by_turn_in_time(ctx, team):
    ctx.projects.create_project("Late", team.id, "bob", TODAY - timedelta(days=2))
    done = ctx.projects.create_project("Late but done", team.id, "bob", TODAY - timedelta(days=2))
    ctx.projects.create_project("This week", team.id, "bob", TODAY + timedelta(days=3))
    ctx.projects.create_project("This month", team.id, "bob", TODAY + timedelta(days=20))
    ctx.projects.create_project("Later", team.id, "bob", TODAY + timedelta(days=90))
    _finish(ctx, done.id, "alice", "bob")
    sign_in_as(ctx, "alice")

    def titles(turn_in_time):
        return [p.title for p in ctx.projects.list_projects(team.id, turn_in_time=turn_in_time)]

    assert titles("OVERDUE") == ["Late"]
    assert titles("IN_ONE_WEEK") == ["This week"]
    assert titles("IN_ONE_MONTH") == ["This week", "This month"]
    assert len(titles("ALL")) == 5
    with pytest.raises(ValueError):
        titles("SOMEDAY")
