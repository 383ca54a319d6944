"""
Authentication and authorization.

- permissions: the immutable role permission matrix
- guard: per-request allow/deny decisions and list scoping
- credentials: session token signing and verification
- passwords: password hashing
- deps: FastAPI dependencies resolving the request's actor
"""

from .credentials import CredentialService
from .guard import Actor, Decision, authorize, require, scope_list
from .passwords import hash_password, verify_password
from .permissions import (
    PERMISSION_MATRIX,
    Action,
    Resource,
    Role,
    allowed_actions,
    is_granted,
    permissions_for,
)

__all__ = [
    "Action",
    "Actor",
    "CredentialService",
    "Decision",
    "PERMISSION_MATRIX",
    "Resource",
    "Role",
    "allowed_actions",
    "authorize",
    "hash_password",
    "is_granted",
    "permissions_for",
    "require",
    "scope_list",
    "verify_password",
]
