# tests/test_viewmodels.py
# Signals are connected directly (same thread), so no event loop is needed.
from __future__ import annotations

from datetime import date, timedelta

import pytest

from teamflow.viewmodels.project_details_viewmodel import ProjectDetailsViewModel
from teamflow.viewmodels.projects_viewmodel import ProjectsViewModel
from teamflow.viewmodels.team_members_viewmodel import TeamMembersViewModel

from conftest import sign_in_as

DEADLINE = date.today() + timedelta(days=5)


class _Recorder:
    def __init__(self, *signals):
        self.calls = {}
        for name, sig in signals:
            self.calls[name] = []
            sig.connect(lambda *args, _n=name: self.calls[_n].append(args))


@pytest.fixture()
def project(ctx, team):
    return ctx.projects.create_project("Release", team.id, "bob", DEADLINE, "ship it")


@pytest.fixture()
def details(ctx):
    vm = ProjectDetailsViewModel(ctx.projects, ctx.users)
    rec = _Recorder(
        ("loaded", vm.loaded),
        ("actions", vm.statusActionsChanged),
        ("status", vm.statusChanged),
        ("error", vm.errorRaised),
        ("saved", vm.saved),
        ("history", vm.historyLoaded),
    )
    return vm, rec


def test_details_load_emits_info_and_actions(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    vm.load(project.id)
    (info,), = rec.calls["loaded"]
    assert info["title"] == "Release"
    assert info["deadline"] == DEADLINE.isoformat()
    assert (info["supervisor"], info["assignee"]) == ("alice", "bob")
    assert info["is_assignee"] and not info["is_supervisor"]
    assert info["can_edit"] is False
    assert rec.calls["actions"] == [(False, True, True, False)]


def test_details_status_change_reloads(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    vm.load(project.id)
    assert vm.set_project_status("Turned In") is True
    assert rec.calls["status"] == [("Turned In",)]
    assert vm.last()["status"] == "TURNED_IN"
    assert rec.calls["actions"][-1] == (True, True, False, False)


def test_details_refusal_surfaces_message(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    vm.load(project.id)
    assert vm.set_project_status("FINISHED") is False
    assert rec.calls["error"][-1][0].startswith("You cannot set the project from status To Do")
    assert vm.last()["status"] == "TO_DO"


def test_details_supervisor_role_message(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    ctx.projects.change_status(project.id, "TURNED_IN")
    vm.load(project.id)
    assert vm.set_project_status("FINISHED") is False
    assert rec.calls["error"][-1] == ("Only the supervisor can set the project as finished.",)


def test_details_without_session(ctx, project, details):
    vm, rec = details
    ctx.users.sign_out()
    vm.load(project.id)
    assert rec.calls["actions"] == [(False, False, False, False)]
    assert vm.set_project_status("IN_PROGRESS") is False
    assert "No user is signed in" in rec.calls["error"][-1][0]


def test_details_save_and_history(ctx, project, details):
    vm, rec = details
    vm.load(project.id)
    assert vm.can_edit()
    assert vm.save_project(title="Release 1", assignee="carol", supervisor="alice", deadline=DEADLINE) is True
    assert rec.calls["saved"] == [(project.id,)]
    assert vm.last()["assignee"] == "carol"

    sign_in_as(ctx, "carol")
    vm.set_project_status("IN_PROGRESS", note="on it")
    vm.load_history()
    (pid, entries), = rec.calls["history"]
    assert pid == project.id
    assert entries[0]["reason"] == "start"
    assert (entries[0]["actor"], entries[0]["old_status"], entries[0]["new_status"]) == ("carol", "To Do", "In Progress")
    assert entries[0]["note"] == "on it"
    assert entries[-1]["reason"] == "create"


def test_details_save_refused_for_assignee(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    vm.load(project.id)
    assert vm.save_project(title="Mine now", assignee="bob", supervisor="bob", deadline=DEADLINE) is False
    assert rec.calls["error"]
    assert rec.calls["saved"] == []


def test_projects_viewmodel_filters_and_create(ctx, team):
    vm = ProjectsViewModel(ctx.projects)
    rec = _Recorder(("reloaded", vm.projectsReloaded), ("error", vm.errorRaised))
    vm.reload()
    assert rec.calls["reloaded"] == [(0, [])]

    vm.set_team(team.id)
    pid = vm.create_project(title="Docs", assignee="carol", deadline=DEADLINE)
    assert pid is not None
    total, rows = rec.calls["reloaded"][-1]
    assert total == 1 and rows[0]["title"] == "Docs" and rows[0]["status_label"] == "To Do"

    assert vm.create_project(title="Docs", assignee="carol", deadline=DEADLINE) is None
    assert "already exists" in rec.calls["error"][-1][0]

    vm.set_status_filter("Finished")
    vm.reload()
    assert rec.calls["reloaded"][-1] == (0, [])
    vm.set_status_filter("All")
    vm.set_privilege_filter(assigned_to_me=True, supervised_by_me=False)
    vm.reload()
    assert rec.calls["reloaded"][-1] == (0, [])


def test_projects_viewmodel_options():
    assert ProjectsViewModel.status_filter_options() == ["All", "To Do", "In Progress", "Turned In", "Finished"]
    assert ProjectsViewModel.turn_in_time_options() == ["ALL", "OVERDUE", "IN_ONE_WEEK", "IN_ONE_MONTH"]


def test_team_members_viewmodel(ctx, team):
    vm = TeamMembersViewModel(ctx.teams)
    rec = _Recorder(("members", vm.membersReloaded), ("error", vm.errorRaised))
    vm.set_team(team.id)
    assert vm.is_manager()
    assert vm.add_member("dave") is True
    assert rec.calls["members"][-1] == (4, ["alice", "bob", "carol", "dave"])
    assert vm.remove_member("alice") is False
    assert "manager" in rec.calls["error"][-1][0]

    sign_in_as(ctx, "bob")
    assert not vm.is_manager()
    assert vm.remove_member("carol") is False


def test_details_unknown_status_reports_error(ctx, project, details):
    vm, rec = details
    sign_in_as(ctx, "bob")
    vm.load(project.id)
    assert vm.set_project_status("Archived") is False
    assert rec.calls["error"][-1] == ("Unknown project status: 'Archived'",)
    assert rec.calls["status"] == []
    assert vm.last()["status"] == "TO_DO"


def test_projects_viewmodel_unknown_status_filter(ctx, team):
    vm = ProjectsViewModel(ctx.projects)
    rec = _Recorder(("reloaded", vm.projectsReloaded), ("error", vm.errorRaised))
    vm.set_team(team.id)
    vm.create_project(title="Docs", assignee="carol", deadline=DEADLINE)

    vm.set_status_filter("To Do")
    vm.set_status_filter("Archived")
    assert rec.calls["error"] == [("Unknown project status: 'Archived'",)]
    vm.reload()
    total, rows = rec.calls["reloaded"][-1]
    assert total == 1 and rows[0]["title"] == "Docs"
