"""
Role permission matrix.

A pure, immutable lookup ``role -> resource -> frozenset(actions)``. It states
what each role may do unconditionally; ownership restrictions are layered on
top by the guard (see ``guard.py``).

Rules:
- admin: every action on every resource, user management included
- department: read strategic issues and strategies; full CRUD on projects
  (own projects only, enforced by the guard); no user management
- unknown roles resolve to the most restrictive role (department)
- unknown resources resolve to the empty set
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional


class Role(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    DEPARTMENT = "department"


class Resource(str, Enum):
    """Guarded resource names."""

    STRATEGIC_ISSUES = "strategic_issues"
    STRATEGIES = "strategies"
    PROJECTS = "projects"
    USERS = "users"


class Action(str, Enum):
    """Actions checked by the guard.

    Only READ/CREATE/UPDATE/DELETE appear in the matrix; the remaining actions
    map onto one of them (see ``MATRIX_ACTION``).
    """

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    CHANGE_PASSWORD = "change_password"


MATRIX_ACTIONS: FrozenSet[Action] = frozenset(
    {Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE}
)

MATRIX_ACTION: Mapping[Action, Action] = MappingProxyType(
    {
        Action.READ: Action.READ,
        Action.CREATE: Action.CREATE,
        Action.UPDATE: Action.UPDATE,
        Action.DELETE: Action.DELETE,
        Action.LIST: Action.READ,
        Action.ACTIVATE: Action.UPDATE,
        Action.DEACTIVATE: Action.UPDATE,
        Action.CHANGE_PASSWORD: Action.UPDATE,
    }
)

_ALL = MATRIX_ACTIONS
_READ_ONLY = frozenset({Action.READ})
_NONE: FrozenSet[Action] = frozenset()

PERMISSION_MATRIX: Mapping[Role, Mapping[Resource, FrozenSet[Action]]] = MappingProxyType(
    {
        Role.ADMIN: MappingProxyType(
            {
                Resource.STRATEGIC_ISSUES: _ALL,
                Resource.STRATEGIES: _ALL,
                Resource.PROJECTS: _ALL,
                Resource.USERS: _ALL,
            }
        ),
        Role.DEPARTMENT: MappingProxyType(
            {
                Resource.STRATEGIC_ISSUES: _READ_ONLY,
                Resource.STRATEGIES: _READ_ONLY,
                Resource.PROJECTS: _ALL,
                Resource.USERS: _NONE,
            }
        ),
    }
)

# Resources whose records are only visible/mutable by their creator (admin aside)
OWNERSHIP_SCOPED: FrozenSet[Resource] = frozenset({Resource.PROJECTS})

_FALLBACK_ROLE = Role.DEPARTMENT


def coerce_role(role: object) -> Role:
    try:
        return Role(role)
    except ValueError:
        return _FALLBACK_ROLE


def coerce_resource(resource: object) -> Optional[Resource]:
    try:
        return Resource(resource)
    except ValueError:
        return None


def allowed_actions(role: object, resource: object) -> FrozenSet[Action]:
    """Return the unconditional action set for ``(role, resource)``.

    Total: never raises, returns an empty set for unknown resources.
    """
    res = coerce_resource(resource)
    if res is None:
        return _NONE
    return PERMISSION_MATRIX[coerce_role(role)].get(res, _NONE)


def is_granted(role: object, resource: object, action: object) -> bool:
    """Check the matrix for an action, mapping derived actions first."""
    try:
        matrix_action = MATRIX_ACTION[Action(action)]
    except ValueError:
        return False
    return matrix_action in allowed_actions(role, resource)


def permissions_for(role: object) -> Dict[str, List[str]]:
    """Per-resource action lists for a role, as exposed to clients."""
    matrix = PERMISSION_MATRIX[coerce_role(role)]
    order = [Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE]
    return {
        resource.value: [a.value for a in order if a in actions]
        for resource, actions in matrix.items()
    }
