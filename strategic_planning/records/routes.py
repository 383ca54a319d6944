"""
HTTP routes for authentication and the four record types.

All endpoints are mounted under ``/api`` and answer with the envelope
``{success, message, data, pagination?}``. Routes stay thin: they resolve
the actor, call a service and wrap the result. Errors raised by services are
translated by the exception handlers in ``api.py``.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth.credentials import CredentialService
from ..auth.deps import get_credential_service, get_current_actor
from ..auth.guard import Actor
from ..auth.permissions import permissions_for
from ..db.base import get_db
from ..errors import AuthenticationError
from .primitives import envelope
from .project import ProjectCreate, ProjectUpdate
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


def _params(request: Request) -> Dict[str, Any]:
    return dict(request.query_params)


def _page(page: Page, message: str, serialize: Optional[Any] = None) -> Dict[str, Any]:
    items = [serialize(item) for item in page.items] if serialize else page.items
    return envelope(items, message, page.pagination())


# =============================================================================
# Auth Endpoints
# =============================================================================

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/login")
async def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Exchange email and password for a session token."""
    user = UserService(db).authenticate(body.email, body.password)
    return envelope(
        {
            "user": user.to_dict(),
            "token": credentials.issue_for(user),
            "permissions": permissions_for(user.role),
        },
        "Login successful",
    )


@auth_router.get("/profile")
async def profile(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).get_active(actor.id)
    if user is None:
        raise AuthenticationError("User not found or inactive")
    return envelope(
        {"user": user.to_dict(), "permissions": permissions_for(user.role)},
        "Profile retrieved",
    )


@auth_router.post("/logout")
async def logout(actor: Actor = Depends(get_current_actor)) -> Dict[str, Any]:
    """Tokens are stateless; the client discards its copy."""
    return envelope(None, "Logout successful")


@auth_router.get("/verify")
async def verify(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).get_active(actor.id)
    if user is None:
        raise AuthenticationError("User not found or inactive")
    return envelope(
        {"valid": True, "user": user.to_dict(), "permissions": permissions_for(user.role)},
        "Token is valid",
    )


# =============================================================================
# Strategic Issue Endpoints
# =============================================================================

strategic_issues_router = APIRouter(prefix="/strategic-issues", tags=["strategic-issues"])


@strategic_issues_router.get("")
async def list_strategic_issues(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    page = StrategicIssueService(db).list(actor, _params(request))
    return _page(page, "Strategic issues retrieved", lambda i: i.to_dict())


@strategic_issues_router.get("/stats")
async def strategic_issue_stats(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(StrategicIssueService(db).stats(actor), "Statistics retrieved")


@strategic_issues_router.get("/{issue_id}")
async def get_strategic_issue(
    issue_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    issue = StrategicIssueService(db).get(actor, issue_id)
    return envelope(issue.to_dict(), "Strategic issue retrieved")


@strategic_issues_router.post("", status_code=201)
async def create_strategic_issue(
    body: StrategicIssueCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    issue = StrategicIssueService(db).create(actor, body)
    return envelope(issue.to_dict(), "Strategic issue created")


@strategic_issues_router.put("/{issue_id}")
async def update_strategic_issue(
    issue_id: str,
    body: StrategicIssueUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    issue = StrategicIssueService(db).update(actor, issue_id, body)
    return envelope(issue.to_dict(), "Strategic issue updated")


@strategic_issues_router.delete("/{issue_id}")
async def delete_strategic_issue(
    issue_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    StrategicIssueService(db).delete(actor, issue_id)
    return envelope(None, "Strategic issue deleted")


# =============================================================================
# Strategy Endpoints
# =============================================================================

strategies_router = APIRouter(prefix="/strategies", tags=["strategies"])


@strategies_router.get("")
async def list_strategies(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    page = StrategyService(db).list(actor, _params(request))
    return _page(page, "Strategies retrieved", lambda s: s.to_dict())


@strategies_router.get("/stats")
async def strategy_stats(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(StrategyService(db).stats(actor), "Statistics retrieved")


@strategies_router.get("/{strategy_id}")
async def get_strategy(
    strategy_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    strategy = StrategyService(db).get(actor, strategy_id)
    return envelope(strategy.to_dict(), "Strategy retrieved")


@strategies_router.post("", status_code=201)
async def create_strategy(
    body: StrategyCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    strategy = StrategyService(db).create(actor, body)
    return envelope(strategy.to_dict(), "Strategy created")


@strategies_router.put("/{strategy_id}")
async def update_strategy(
    strategy_id: str,
    body: StrategyUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    strategy = StrategyService(db).update(actor, strategy_id, body)
    return envelope(strategy.to_dict(), "Strategy updated")


@strategies_router.delete("/{strategy_id}")
async def delete_strategy(
    strategy_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    StrategyService(db).delete(actor, strategy_id)
    return envelope(None, "Strategy deleted")


# =============================================================================
# Project Endpoints
# =============================================================================

projects_router = APIRouter(prefix="/projects", tags=["projects"])


# Public routes are declared before /{project_id} so they are matched first
@projects_router.get("/public")
async def list_public_projects(
    request: Request,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Anonymous project list (default limit 10)."""
    page = ProjectService(db).list_public(_params(request))
    return _page(page, "Projects retrieved")


@projects_router.get("/public/stats")
async def public_project_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return envelope(ProjectService(db).stats_public(), "Statistics retrieved")


@projects_router.get("")
async def list_projects(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    page = ProjectService(db).list(actor, _params(request))
    return _page(page, "Projects retrieved")


@projects_router.get("/stats")
async def project_stats(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(ProjectService(db).stats(actor), "Statistics retrieved")


@projects_router.get("/{project_id}")
async def get_project(
    project_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(ProjectService(db).get(actor, project_id), "Project retrieved")


@projects_router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(ProjectService(db).create(actor, body), "Project created")


@projects_router.put("/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    project = ProjectService(db).update(actor, project_id, body)
    return envelope(project, "Project updated")


@projects_router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    ProjectService(db).delete(actor, project_id)
    return envelope(None, "Project deleted")


# =============================================================================
# User Endpoints
# =============================================================================

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.get("")
async def list_users(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    page = UserService(db).list(actor, _params(request))
    return _page(page, "Users retrieved", lambda u: u.to_dict())


@users_router.get("/stats")
async def user_stats(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(UserService(db).stats(actor), "Statistics retrieved")


@users_router.get("/{user_id}")
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(UserService(db).get(actor, user_id).to_dict(), "User retrieved")


@users_router.post("", status_code=201)
async def create_user(
    body: UserCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return envelope(UserService(db).create(actor, body).to_dict(), "User created")


@users_router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).update(actor, user_id, body)
    return envelope(user.to_dict(), "User updated")


@users_router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    UserService(db).delete(actor, user_id)
    return envelope(None, "User deleted")


@users_router.put("/{user_id}/activate")
async def activate_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).activate(actor, user_id)
    return envelope(user.to_dict(), "User activated")


@users_router.put("/{user_id}/deactivate")
async def deactivate_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).deactivate(actor, user_id)
    return envelope(user.to_dict(), "User deactivated")


@users_router.put("/{user_id}/change-password")
async def change_password(
    user_id: str,
    body: PasswordChange,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    UserService(db).change_password(actor, user_id, body)
    return envelope(None, "Password changed")


routers = [
    auth_router,
    strategic_issues_router,
    strategies_router,
    projects_router,
    users_router,
]
