# tests/test_status_rules.py
from __future__ import annotations

import pytest

from teamflow.models.types import ProjectStatus
from teamflow.services import status_rules
from teamflow.services.status_rules import AvailableActions

S = ProjectStatus

SUP, ASG, NONE = frozenset({"supervisor"}), frozenset({"assignee"}), frozenset()


# 4 statuses x (supervisor, assignee, neither) = 12 cases
@pytest.mark.parametrize(
    "current,roles,expected",
    [
        (S.TO_DO, SUP, AvailableActions()),
        (S.TO_DO, ASG, AvailableActions(in_progress=True, turned_in=True)),
        (S.TO_DO, NONE, AvailableActions()),
        (S.IN_PROGRESS, SUP, AvailableActions()),
        (S.IN_PROGRESS, ASG, AvailableActions(to_do=True, turned_in=True)),
        (S.IN_PROGRESS, NONE, AvailableActions()),
        (S.TURNED_IN, SUP, AvailableActions(to_do=True, in_progress=True, finished=True)),
        (S.TURNED_IN, ASG, AvailableActions(to_do=True, in_progress=True)),
        (S.TURNED_IN, NONE, AvailableActions()),
        (S.FINISHED, SUP, AvailableActions()),
        (S.FINISHED, ASG, AvailableActions()),
        (S.FINISHED, NONE, AvailableActions()),
    ],
)
def test_available_actions_matrix(current, roles, expected):
    assert status_rules.available_actions(current, roles) == expected


def test_finished_has_no_way_out():
    for role in status_rules.ROLES:
        assert status_rules.allowed_targets(S.FINISHED, [role]) == frozenset()
    for target in S:
        assert status_rules.is_reachable(S.FINISHED, target) is False


def test_roles_of_uses_raw_id_equality():
    assert status_rules.roles_of(1, supervisor_id=1, assignee_id=2) == {"supervisor"}
    assert status_rules.roles_of(2, supervisor_id=1, assignee_id=2) == {"assignee"}
    assert status_rules.roles_of(3, supervisor_id=1, assignee_id=2) == frozenset()
    assert status_rules.roles_of(1, supervisor_id=1, assignee_id=1) == {"supervisor", "assignee"}


def test_dual_role_gets_union_of_both_columns():
    both = {"supervisor", "assignee"}
    assert status_rules.available_actions(S.TO_DO, both) == AvailableActions(in_progress=True, turned_in=True)
    assert status_rules.available_actions(S.TURNED_IN, both) == AvailableActions(
        to_do=True, in_progress=True, finished=True
    )


@pytest.mark.parametrize(
    "current,target,role",
    [
        (S.TURNED_IN, S.FINISHED, "supervisor"),
        (S.TO_DO, S.IN_PROGRESS, "assignee"),
        (S.IN_PROGRESS, S.TURNED_IN, "assignee"),
        (S.IN_PROGRESS, S.FINISHED, None),
        (S.TO_DO, S.TO_DO, None),
    ],
)
def test_required_role(current, target, role):
    assert status_rules.required_role(current, target) == role


def test_available_actions_as_dict_keys():
    actions = AvailableActions(turned_in=True)
    assert actions.as_dict() == {"toDo": False, "inProgress": False, "turnedIn": True, "finished": False}
    assert actions.as_tuple() == (False, False, True, False)


@pytest.mark.parametrize("value", ["TURNED_IN", "turned_in", "Turned In", S.TURNED_IN])
def test_status_parse_accepts_names_and_labels(value):
    assert ProjectStatus.parse(value) is S.TURNED_IN


def test_status_parse_rejects_unknown():
    with pytest.raises(ValueError):
        ProjectStatus.parse("ARCHIVED")


def test_status_ids_round_trip_against_seeded_table(db):
    rows = db.conn.execute("SELECT id, name FROM project_statuses ORDER BY id").fetchall()
    assert [(r["id"], r["name"]) for r in rows] == [(s.status_id, s.value) for s in S]
