"""Tests for the role permission matrix."""

import pytest

from strategic_planning.auth.permissions import (
    OWNERSHIP_SCOPED,
    PERMISSION_MATRIX,
    Action,
    Resource,
    Role,
    allowed_actions,
    coerce_resource,
    coerce_role,
    is_granted,
    permissions_for,
)

CRUD = {Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE}


class TestMatrix:
    """The matrix itself."""

    @pytest.mark.parametrize("resource", list(Resource))
    def test_admin_has_everything(self, resource):
        assert allowed_actions(Role.ADMIN, resource) == CRUD

    @pytest.mark.parametrize(
        "resource,expected",
        [
            (Resource.STRATEGIC_ISSUES, {Action.READ}),
            (Resource.STRATEGIES, {Action.READ}),
            (Resource.PROJECTS, CRUD),
            (Resource.USERS, set()),
        ],
    )
    def test_department_row(self, resource, expected):
        assert allowed_actions(Role.DEPARTMENT, resource) == expected

    def test_matrix_is_read_only(self):
        with pytest.raises(TypeError):
            PERMISSION_MATRIX[Role.ADMIN] = {}  # type: ignore[index]
        with pytest.raises(TypeError):
            PERMISSION_MATRIX[Role.DEPARTMENT][Resource.USERS] = CRUD  # type: ignore[index]

    def test_only_projects_are_ownership_scoped(self):
        assert OWNERSHIP_SCOPED == {Resource.PROJECTS}

    def test_plain_strings_are_accepted(self):
        assert allowed_actions("department", "projects") == CRUD


class TestTotality:
    """Unknown inputs never raise."""

    def test_unknown_role_falls_back_to_department(self):
        assert coerce_role("superuser") == Role.DEPARTMENT
        assert allowed_actions("superuser", Resource.USERS) == set()
        assert allowed_actions(None, Resource.PROJECTS) == CRUD

    def test_unknown_resource_is_empty(self):
        assert coerce_resource("budgets") is None
        assert allowed_actions(Role.ADMIN, "budgets") == set()

    def test_unknown_action_is_not_granted(self):
        assert is_granted(Role.ADMIN, Resource.PROJECTS, "export") is False


class TestDerivedActions:
    """Non-CRUD actions map onto a matrix action."""

    def test_list_maps_to_read(self):
        assert is_granted(Role.DEPARTMENT, Resource.STRATEGIES, Action.LIST)
        assert not is_granted(Role.DEPARTMENT, Resource.USERS, Action.LIST)

    @pytest.mark.parametrize(
        "action", [Action.ACTIVATE, Action.DEACTIVATE, Action.CHANGE_PASSWORD]
    )
    def test_account_actions_map_to_update(self, action):
        assert is_granted(Role.ADMIN, Resource.USERS, action)
        assert not is_granted(Role.DEPARTMENT, Resource.USERS, action)


def test_permissions_for_department():
    assert permissions_for("department") == {
        "strategic_issues": ["read"],
        "strategies": ["read"],
        "projects": ["read", "create", "update", "delete"],
        "users": [],
    }
