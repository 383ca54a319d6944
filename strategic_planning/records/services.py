"""
Record service layer.

Each service wraps a SQLAlchemy session and runs every verb through the same
pipeline: authorization guard -> filter builder (lists) -> storage ->
relationship resolver (project reads). Services raise the errors from
``strategic_planning.errors``; the API layer maps them to HTTP responses.

The anonymous project list and stats are separate, explicitly named methods
(``ProjectService.list_public`` / ``ProjectService.stats_public``) and are the
only reads that skip the guard.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import structlog
from sqlalchemy import case, desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from ..auth.guard import Actor, require, scope_list
from ..auth.passwords import hash_password, verify_password
from ..auth.permissions import Action, Resource, Role
from ..config import get_settings
from ..db.models import (
    ProjectModel,
    StrategicIssueModel,
    StrategyModel,
    UserModel,
    period_is_valid,
)
from ..errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..query.filters import (
    PROJECT_FILTERS,
    PUBLIC_PROJECT_FILTERS,
    STRATEGIC_ISSUE_FILTERS,
    STRATEGY_FILTERS,
    USER_FILTERS,
    build,
    fetch_page,
)
from .primitives import page_info
from .project import ProjectCreate, ProjectUpdate
from .resolver import RelationshipResolver
from .strategic_issue import StrategicIssueCreate, StrategicIssueUpdate
from .strategy import StrategyCreate, StrategyUpdate
from .user import PasswordChange, UserCreate, UserUpdate

logger = structlog.get_logger()

Params = Optional[Mapping[str, Any]]


@dataclass
class Page:
    """One page of a list result; ``total`` counts with the same filters."""

    items: List[Any]
    total: int
    limit: Optional[int]
    offset: int

    def pagination(self) -> Dict[str, int]:
        return page_info(self.total, self.limit, self.offset)


def _column_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Unwrap enum members into their stored string values."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in values.items()
    }


def _changes(data: Any) -> Dict[str, Any]:
    changes = _column_values(data.model_dump(exclude_unset=True))
    if not changes:
        raise ValidationError("No updatable fields supplied")
    return changes


def _count_rows(rows: List[Any], key: str) -> List[Dict[str, Any]]:
    return [{key: row[0], "count": row[1]} for row in rows]


class StrategicIssueService:
    """Service for managing strategic issues."""

    resource = Resource.STRATEGIC_ISSUES

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, issue_id: str) -> StrategicIssueModel:
        issue = (
            self.db.query(StrategicIssueModel)
            .filter(StrategicIssueModel.id == issue_id)
            .first()
        )
        if issue is None:
            raise NotFoundError("Strategic issue", issue_id)
        return issue

    def list(self, actor: Optional[Actor], params: Params = None) -> Page:
        """List strategic issues with filters and pagination."""
        require(actor, self.resource, Action.LIST)
        list_query = build(params, STRATEGIC_ISSUE_FILTERS, scope_list(actor, self.resource))
        items, total = fetch_page(
            self.db.query(StrategicIssueModel), StrategicIssueModel, list_query
        )
        return Page(items, total, list_query.limit, list_query.offset)

    def get(self, actor: Optional[Actor], issue_id: str) -> StrategicIssueModel:
        require(actor, self.resource, Action.READ)
        issue = self._get_or_404(issue_id)
        require(actor, self.resource, Action.READ, issue)
        return issue

    def next_order(self, start_year: int, end_year: int) -> int:
        """Position after the last issue of the same period."""
        count = (
            self.db.query(func.count(StrategicIssueModel.id))
            .filter(
                StrategicIssueModel.start_year == start_year,
                StrategicIssueModel.end_year == end_year,
            )
            .scalar()
        )
        return (count or 0) + 1

    def create(
        self, actor: Optional[Actor], data: StrategicIssueCreate
    ) -> StrategicIssueModel:
        """Create a strategic issue owned by ``actor``."""
        require(actor, self.resource, Action.CREATE)
        values = _column_values(data.model_dump())
        if values.get("order") is None:
            values["order"] = self.next_order(values["start_year"], values["end_year"])

        issue = StrategicIssueModel(**values, created_by=actor.id)
        self.db.add(issue)
        self.db.commit()
        self.db.refresh(issue)

        logger.info("Strategic issue created", issue_id=issue.id, actor_id=actor.id)
        return issue

    def update(
        self, actor: Optional[Actor], issue_id: str, data: StrategicIssueUpdate
    ) -> StrategicIssueModel:
        """Merge allow-listed fields into an existing issue."""
        require(actor, self.resource, Action.UPDATE)
        issue = self._get_or_404(issue_id)
        require(actor, self.resource, Action.UPDATE, issue)

        changes = _changes(data)
        start = changes.get("start_year", issue.start_year)
        end = changes.get("end_year", issue.end_year)
        if not period_is_valid(start, end):
            raise ValidationError("end_year must not be earlier than start_year")

        for key, value in changes.items():
            setattr(issue, key, value)
        self.db.commit()
        self.db.refresh(issue)

        logger.info(
            "Strategic issue updated",
            issue_id=issue.id,
            actor_id=actor.id,
            fields=sorted(changes),
        )
        return issue

    def delete(self, actor: Optional[Actor], issue_id: str) -> None:
        """Delete an issue and the strategies beneath it."""
        require(actor, self.resource, Action.DELETE)
        issue = self._get_or_404(issue_id)
        require(actor, self.resource, Action.DELETE, issue)

        removed = (
            self.db.query(StrategyModel)
            .filter(StrategyModel.strategic_issue_id == issue_id)
            .delete(synchronize_session=False)
        )
        self.db.delete(issue)
        self.db.commit()

        logger.info(
            "Strategic issue deleted",
            issue_id=issue_id,
            actor_id=actor.id,
            strategies_removed=removed,
        )

    def stats(self, actor: Optional[Actor]) -> Dict[str, Any]:
        require(actor, self.resource, Action.READ)

        def _status_count(status: str) -> Any:
            return func.coalesce(
                func.sum(case((StrategicIssueModel.status == status, 1), else_=0)), 0
            )

        row = self.db.query(
            func.count(StrategicIssueModel.id),
            _status_count("active"),
            _status_count("completed"),
            _status_count("inactive"),
            func.min(StrategicIssueModel.start_year),
            func.max(StrategicIssueModel.end_year),
        ).one()
        return {
            "total": row[0],
            "active": int(row[1]),
            "completed": int(row[2]),
            "inactive": int(row[3]),
            "earliest_year": row[4],
            "latest_year": row[5],
        }


class StrategyService:
    """Service for managing strategies."""

    resource = Resource.STRATEGIES

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, strategy_id: str) -> StrategyModel:
        strategy = (
            self.db.query(StrategyModel).filter(StrategyModel.id == strategy_id).first()
        )
        if strategy is None:
            raise NotFoundError("Strategy", strategy_id)
        return strategy

    def list(self, actor: Optional[Actor], params: Params = None) -> Page:
        """List strategies with filters and pagination."""
        require(actor, self.resource, Action.LIST)
        list_query = build(params, STRATEGY_FILTERS, scope_list(actor, self.resource))
        items, total = fetch_page(self.db.query(StrategyModel), StrategyModel, list_query)
        return Page(items, total, list_query.limit, list_query.offset)

    def get(self, actor: Optional[Actor], strategy_id: str) -> StrategyModel:
        require(actor, self.resource, Action.READ)
        strategy = self._get_or_404(strategy_id)
        require(actor, self.resource, Action.READ, strategy)
        return strategy

    def next_order(self, strategic_issue_id: Optional[str]) -> int:
        """Position after the last strategy of the same issue."""
        count = (
            self.db.query(func.count(StrategyModel.id))
            .filter(StrategyModel.strategic_issue_id == strategic_issue_id)
            .scalar()
        )
        return (count or 0) + 1

    def create(self, actor: Optional[Actor], data: StrategyCreate) -> StrategyModel:
        """Create a strategy owned by ``actor``."""
        require(actor, self.resource, Action.CREATE)
        values = _column_values(data.model_dump())
        if values.get("order") is None:
            values["order"] = self.next_order(values["strategic_issue_id"])

        strategy = StrategyModel(**values, created_by=actor.id)
        self.db.add(strategy)
        self.db.commit()
        self.db.refresh(strategy)

        logger.info(
            "Strategy created",
            strategy_id=strategy.id,
            strategic_issue_id=strategy.strategic_issue_id,
            actor_id=actor.id,
        )
        return strategy

    def update(
        self, actor: Optional[Actor], strategy_id: str, data: StrategyUpdate
    ) -> StrategyModel:
        require(actor, self.resource, Action.UPDATE)
        strategy = self._get_or_404(strategy_id)
        require(actor, self.resource, Action.UPDATE, strategy)

        changes = _changes(data)
        for key, value in changes.items():
            setattr(strategy, key, value)
        self.db.commit()
        self.db.refresh(strategy)

        logger.info(
            "Strategy updated",
            strategy_id=strategy.id,
            actor_id=actor.id,
            fields=sorted(changes),
        )
        return strategy

    def delete(self, actor: Optional[Actor], strategy_id: str) -> None:
        require(actor, self.resource, Action.DELETE)
        strategy = self._get_or_404(strategy_id)
        require(actor, self.resource, Action.DELETE, strategy)

        self.db.delete(strategy)
        self.db.commit()
        logger.info("Strategy deleted", strategy_id=strategy_id, actor_id=actor.id)

    def stats(self, actor: Optional[Actor]) -> Dict[str, Any]:
        require(actor, self.resource, Action.READ)

        total = self.db.query(func.count(StrategyModel.id)).scalar()

        strategy_count = func.count(StrategyModel.id)
        by_issue = (
            self.db.query(StrategicIssueModel.title, strategy_count)
            .outerjoin(
                StrategyModel,
                StrategyModel.strategic_issue_id == StrategicIssueModel.id,
            )
            .group_by(StrategicIssueModel.id, StrategicIssueModel.title)
            .order_by(desc(strategy_count))
            .all()
        )

        creator_count = func.count(StrategyModel.id)
        by_creator = (
            self.db.query(UserModel, creator_count)
            .join(StrategyModel, StrategyModel.created_by == UserModel.id)
            .group_by(UserModel.id)
            .order_by(desc(creator_count))
            .all()
        )

        recent = (
            self.db.query(StrategyModel)
            .order_by(desc(StrategyModel.created_at))
            .limit(10)
            .all()
        )

        return {
            "total": total,
            "by_strategic_issue": _count_rows(by_issue, "title"),
            "by_creator": [
                {"creator_name": user.display_name, "count": count}
                for user, count in by_creator
            ],
            "recent_activity": [
                {
                    "id": s.id,
                    "name": s.name,
                    "strategic_issue_id": s.strategic_issue_id,
                    "strategic_issue_title": (
                        s.strategic_issue.title if s.strategic_issue else None
                    ),
                    "created_at": s.to_dict()["created_at"],
                }
                for s in recent
            ],
        }


class ProjectService:
    """Service for managing projects; non-admin actors only see their own."""

    resource = Resource.PROJECTS

    def __init__(self, db: Session, resolver: Optional[RelationshipResolver] = None):
        self.db = db
        self.resolver = resolver or RelationshipResolver(db)

    def _get_or_404(self, project_id: str) -> ProjectModel:
        project = (
            self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        )
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    def _page(self, params: Params, spec: Any, owner: Optional[str]) -> Page:
        list_query = build(params, spec, owner)
        items, total = fetch_page(self.db.query(ProjectModel), ProjectModel, list_query)
        return Page(
            self.resolver.hydrate_many(items), total, list_query.limit, list_query.offset
        )

    def list(self, actor: Optional[Actor], params: Params = None) -> Page:
        """List projects, scoped to the actor's own unless admin; hydrated."""
        require(actor, self.resource, Action.LIST)
        return self._page(params, PROJECT_FILTERS, scope_list(actor, self.resource))

    def list_public(self, params: Params = None) -> Page:
        """Anonymous project list. Never consults the guard; default limit 10."""
        return self._page(params, PUBLIC_PROJECT_FILTERS, None)

    def get(self, actor: Optional[Actor], project_id: str) -> Dict[str, Any]:
        """Fetch one project (owner-checked) with resolved associations."""
        require(actor, self.resource, Action.READ)
        project = self._get_or_404(project_id)
        require(actor, self.resource, Action.READ, project)
        return self.resolver.hydrate(project)

    def create(self, actor: Optional[Actor], data: ProjectCreate) -> Dict[str, Any]:
        """Create a project owned by ``actor``. Association ids are not checked."""
        require(actor, self.resource, Action.CREATE)
        values = _column_values(data.model_dump())
        if not values.get("province"):
            values["province"] = get_settings().default_province

        project = ProjectModel(**values, created_by=actor.id)
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)

        logger.info("Project created", project_id=project.id, actor_id=actor.id)
        return self.resolver.hydrate(project)

    def update(
        self, actor: Optional[Actor], project_id: str, data: ProjectUpdate
    ) -> Dict[str, Any]:
        """Merge allow-listed fields, then re-read with resolved associations."""
        require(actor, self.resource, Action.UPDATE)
        project = self._get_or_404(project_id)
        require(actor, self.resource, Action.UPDATE, project)

        changes = _changes(data)
        start = changes.get("start_date", project.start_date)
        end = changes.get("end_date", project.end_date)
        if not period_is_valid(start, end):
            raise ValidationError("end_date must not be earlier than start_date")

        for key, value in changes.items():
            setattr(project, key, value)
        self.db.commit()

        logger.info(
            "Project updated",
            project_id=project_id,
            actor_id=actor.id,
            fields=sorted(changes),
        )
        return self.resolver.hydrate(self._get_or_404(project_id))

    def delete(self, actor: Optional[Actor], project_id: str) -> None:
        require(actor, self.resource, Action.DELETE)
        project = self._get_or_404(project_id)
        require(actor, self.resource, Action.DELETE, project)

        self.db.delete(project)
        self.db.commit()
        logger.info("Project deleted", project_id=project_id, actor_id=actor.id)

    def stats(self, actor: Optional[Actor]) -> Dict[str, Any]:
        """Project statistics over the projects the actor may list."""
        require(actor, self.resource, Action.LIST)
        return self._stats(scope_list(actor, self.resource))

    def stats_public(self) -> Dict[str, Any]:
        """Anonymous statistics over all projects. Never consults the guard."""
        return self._stats(None)

    def _stats(self, owner: Optional[str]) -> Dict[str, Any]:
        def _scoped(query: Query) -> Query:
            if owner is not None:
                query = query.filter(ProjectModel.created_by == owner)
            return query

        total = _scoped(self.db.query(func.count(ProjectModel.id))).scalar()

        by_status = (
            _scoped(self.db.query(ProjectModel.status, func.count(ProjectModel.id)))
            .group_by(ProjectModel.status)
            .all()
        )
        by_type = (
            _scoped(
                self.db.query(ProjectModel.project_type, func.count(ProjectModel.id))
            )
            .group_by(ProjectModel.project_type)
            .all()
        )

        budget = (
            _scoped(
                self.db.query(
                    func.sum(ProjectModel.budget),
                    func.avg(ProjectModel.budget),
                    func.min(ProjectModel.budget),
                    func.max(ProjectModel.budget),
                )
            )
            .filter(ProjectModel.budget.isnot(None))
            .one()
        )

        recent = (
            _scoped(self.db.query(ProjectModel))
            .order_by(desc(ProjectModel.created_at))
            .limit(10)
            .all()
        )

        return {
            "total": total,
            "by_status": _count_rows(by_status, "status"),
            "by_type": _count_rows(by_type, "project_type"),
            "budget": {
                "total": float(budget[0] or 0),
                "average": float(budget[1] or 0),
                "min": float(budget[2] or 0),
                "max": float(budget[3] or 0),
            },
            "recent_projects": [
                {
                    "id": p.id,
                    "name": p.name,
                    "status": p.status,
                    "budget": p.budget if p.budget is not None else 0,
                    "start_date": p.start_date.isoformat() if p.start_date else None,
                }
                for p in recent
            ],
        }


class UserService:
    """Service for managing user accounts."""

    resource = Resource.USERS

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def _get_or_404(self, user_id: str) -> UserModel:
        user = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_by_email(self, email: str) -> Optional[UserModel]:
        """Case-insensitive lookup, active and inactive accounts alike."""
        return (
            self.db.query(UserModel)
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .first()
        )

    def get_active(self, user_id: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.id == user_id, UserModel.is_active.is_(True))
            .first()
        )

    def _check_password(self, password: str) -> None:
        minimum = self.settings.min_password_length
        if len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

    def authenticate(self, email: str, password: str) -> UserModel:
        """Return the active user matching the credentials."""
        user = self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed", email=email)
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            logger.info("Login refused for inactive account", user_id=user.id)
            raise AuthenticationError("Account is deactivated")

        logger.info("User logged in", user_id=user.id)
        return user

    def list(self, actor: Optional[Actor], params: Params = None) -> Page:
        """List users (admin only)."""
        require(actor, self.resource, Action.LIST)
        list_query = build(params, USER_FILTERS, scope_list(actor, self.resource))
        items, total = fetch_page(self.db.query(UserModel), UserModel, list_query)
        return Page(items, total, list_query.limit, list_query.offset)

    def get(self, actor: Optional[Actor], user_id: str) -> UserModel:
        """Admin, or the user themself."""
        require(actor, self.resource, Action.READ, {"id": user_id})
        return self._get_or_404(user_id)

    def create(self, actor: Optional[Actor], data: UserCreate) -> UserModel:
        require(actor, self.resource, Action.CREATE)
        self._check_password(data.password)
        if self.get_by_email(data.email) is not None:
            raise ConflictError(f"Email '{data.email}' is already registered")

        values = _column_values(data.model_dump(exclude={"password"}))
        user = UserModel(**values, password_hash=hash_password(data.password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(f"Email '{data.email}' is already registered") from exc
        self.db.refresh(user)

        logger.info("User created", user_id=user.id, role=user.role, actor_id=actor.id)
        return user

    def update(
        self, actor: Optional[Actor], user_id: str, data: UserUpdate
    ) -> UserModel:
        """Admin, or the user themself; only admin may change roles."""
        require(actor, self.resource, Action.UPDATE, {"id": user_id})
        user = self._get_or_404(user_id)

        changes = _changes(data)
        if "role" in changes and changes["role"] != user.role and not actor.is_admin:
            raise AuthorizationError("Only administrators can change roles")

        if "email" in changes and changes["email"] != user.email:
            existing = self.get_by_email(changes["email"])
            if existing is not None and existing.id != user.id:
                raise ConflictError(f"Email '{changes['email']}' is already registered")

        for key, value in changes.items():
            setattr(user, key, value)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Email is already registered") from exc
        self.db.refresh(user)

        logger.info(
            "User updated", user_id=user.id, actor_id=actor.id, fields=sorted(changes)
        )
        return user

    def _set_active(self, user_id: str, active: bool) -> UserModel:
        user = self._get_or_404(user_id)
        user.is_active = active
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, actor: Optional[Actor], user_id: str) -> UserModel:
        """Soft delete: the account is deactivated, never removed."""
        require(actor, self.resource, Action.DELETE, {"id": user_id})
        user = self._set_active(user_id, False)
        logger.info("User deleted", user_id=user_id, actor_id=actor.id)
        return user

    def activate(self, actor: Optional[Actor], user_id: str) -> UserModel:
        require(actor, self.resource, Action.ACTIVATE, {"id": user_id})
        user = self._set_active(user_id, True)
        logger.info("User activated", user_id=user_id, actor_id=actor.id)
        return user

    def deactivate(self, actor: Optional[Actor], user_id: str) -> UserModel:
        require(actor, self.resource, Action.DEACTIVATE, {"id": user_id})
        user = self._set_active(user_id, False)
        logger.info("User deactivated", user_id=user_id, actor_id=actor.id)
        return user

    def change_password(
        self, actor: Optional[Actor], user_id: str, data: PasswordChange
    ) -> None:
        """Admin, or the user themself with their current password."""
        require(actor, self.resource, Action.CHANGE_PASSWORD, {"id": user_id})
        user = self._get_or_404(user_id)

        if not actor.is_admin:
            if not data.current_password:
                raise ValidationError("Current password is required")
            if not verify_password(data.current_password, user.password_hash):
                raise ValidationError("Current password is incorrect")

        self._check_password(data.new_password)
        user.password_hash = hash_password(data.new_password)
        self.db.commit()
        logger.info("Password changed", user_id=user_id, actor_id=actor.id)

    def stats(self, actor: Optional[Actor]) -> Dict[str, Any]:
        require(actor, self.resource, Action.READ)

        def _count(*criteria: Any) -> int:
            return self.db.query(func.count(UserModel.id)).filter(*criteria).scalar()

        department_count = func.count(UserModel.id)
        by_department = (
            self.db.query(UserModel.department, department_count)
            .filter(UserModel.department.isnot(None), UserModel.department != "")
            .group_by(UserModel.department)
            .order_by(desc(department_count))
            .all()
        )
        recent = (
            self.db.query(UserModel).order_by(desc(UserModel.created_at)).limit(5).all()
        )

        return {
            "total": _count(),
            "active": _count(UserModel.is_active.is_(True)),
            "inactive": _count(UserModel.is_active.is_(False)),
            "admin": _count(UserModel.role == Role.ADMIN.value),
            "department": _count(UserModel.role == Role.DEPARTMENT.value),
            "by_department": _count_rows(by_department, "department"),
            "recent_users": [
                {
                    key: value
                    for key, value in user.to_dict().items()
                    if key
                    in (
                        "id",
                        "email",
                        "first_name",
                        "last_name",
                        "role",
                        "department",
                        "created_at",
                    )
                }
                for user in recent
            ],
        }
