"""
Authorization guard.

Every record service asks the guard before touching storage. The guard
combines the permission matrix, the actor's identity and, for single-record
actions, the target record's owner:

1. unauthenticated callers are denied
2. nobody may delete or deactivate their own account (admin included)
3. admin is allowed everything else
4. non-admin users may read/update/change_password their own user record
5. the matrix decides the remaining cases
6. ownership-scoped resources additionally require ``created_by == actor.id``

List operations are never denied on ownership; ``scope_list`` returns the
owner filter the query builder must AND in instead.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..errors import AuthenticationError, AuthorizationError
from .permissions import (
    OWNERSHIP_SCOPED,
    Action,
    Resource,
    Role,
    coerce_resource,
    is_granted,
)

logger = structlog.get_logger()

UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
NOT_OWNER = "not owner"
SELF_PROTECTED = "self-protection"

_SELF_SERVICE = frozenset({Action.READ, Action.UPDATE, Action.CHANGE_PASSWORD})
_SELF_PROTECTED = frozenset({Action.DELETE, Action.DEACTIVATE})
_OWNER_CHECKED = frozenset({Action.READ, Action.UPDATE, Action.DELETE})


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, rebuilt from a verified credential per request."""

    id: str
    role: str
    department: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)


def _target_attr(target: Any, name: str) -> Any:
    if target is None:
        return None
    if isinstance(target, dict):
        return target.get(name)
    return getattr(target, name, None)


def authorize(
    actor: Optional[Actor],
    resource: Any,
    action: Any,
    target: Any = None,
) -> Decision:
    """
    Decide whether ``actor`` may perform ``action`` on ``resource``.

    ``target`` is the stored record (model instance or dict) for
    single-record actions, or ``None`` for list/create. Deterministic and
    total for known and unknown roles alike.
    """
    if actor is None:
        return Decision.deny(UNAUTHENTICATED)

    try:
        action = Action(action)
        resource = Resource(resource)
    except ValueError:
        return Decision.deny(FORBIDDEN)

    if resource == Resource.USERS and action in _SELF_PROTECTED:
        if target is not None and _target_attr(target, "id") == actor.id:
            return Decision.deny(SELF_PROTECTED)

    if actor.is_admin:
        return Decision.allow()

    if resource == Resource.USERS and action in _SELF_SERVICE and target is not None:
        if _target_attr(target, "id") == actor.id:
            return Decision.allow()
        return Decision.deny(NOT_OWNER)

    if not is_granted(actor.role, resource, action):
        return Decision.deny(FORBIDDEN)

    if (
        resource in OWNERSHIP_SCOPED
        and action in _OWNER_CHECKED
        and target is not None
        and _target_attr(target, "created_by") != actor.id
    ):
        return Decision.deny(NOT_OWNER)

    return Decision.allow()


def scope_list(actor: Optional[Actor], resource: Any) -> Optional[str]:
    """Owner filter for list/stats queries, or ``None`` when unscoped."""
    if actor is None or actor.is_admin:
        return None
    if coerce_resource(resource) in OWNERSHIP_SCOPED:
        return actor.id
    return None


def require(
    actor: Optional[Actor],
    resource: Any,
    action: Any,
    target: Any = None,
) -> Actor:
    """Like ``authorize`` but raises on deny; returns the actor on allow."""
    decision = authorize(actor, resource, action, target)
    if decision.allowed:
        return actor

    resource_name = getattr(resource, "value", resource)
    action_name = getattr(action, "value", action)
    logger.info(
        "Authorization denied",
        actor_id=actor.id if actor else None,
        resource=resource_name,
        action=action_name,
        reason=decision.reason,
    )

    if decision.reason == UNAUTHENTICATED:
        raise AuthenticationError("Authentication required")
    if decision.reason == SELF_PROTECTED:
        raise AuthorizationError(
            f"Cannot {action_name} your own account", reason=decision.reason
        )
    if decision.reason == NOT_OWNER:
        raise AuthorizationError(
            f"Not allowed to {action_name} this record", reason=decision.reason
        )
    raise AuthorizationError(
        f"Insufficient permissions to {action_name} {resource_name}",
        reason=decision.reason,
    )
