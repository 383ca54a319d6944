"""
Planning records: strategic issues, strategies, projects and user accounts.

- enums / primitives: shared field values and response helpers
- strategic_issue, strategy, project, user: request schemas
- resolver: hydration of project association ids
- services: guarded CRUD, listing and statistics per record type
- routes: the HTTP surface mounted under /api
"""

from .enums import ProjectStatus, ProjectType, StrategicIssueStatus
from .project import ProjectCreate, ProjectUpdate
from .resolver import Missing, ProjectResolution, RelationshipResolver, Resolved
from .services import (
    Page,
    ProjectService,
    StrategicIssueService,
    StrategyService,
    UserService,
)
from .strategic_issue import StrategicIssueCreate, StrategicIssueUpdate
from .strategy import StrategyCreate, StrategyUpdate
from .user import LoginRequest, PasswordChange, UserCreate, UserUpdate

__all__ = [
    "LoginRequest",
    "Missing",
    "Page",
    "PasswordChange",
    "ProjectCreate",
    "ProjectResolution",
    "ProjectService",
    "ProjectStatus",
    "ProjectType",
    "ProjectUpdate",
    "RelationshipResolver",
    "Resolved",
    "StrategicIssueCreate",
    "StrategicIssueService",
    "StrategicIssueStatus",
    "StrategicIssueUpdate",
    "StrategyCreate",
    "StrategyService",
    "StrategyUpdate",
    "UserCreate",
    "UserService",
    "UserUpdate",
]
