"""
SQLAlchemy models for the Strategic Planning backend.

Ownership (``created_by``) and the project association lists are stored as
plain values, not foreign keys: a project may keep referencing a strategic
issue or strategy that has since been deleted.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base


def generate_id() -> str:
    """Generate a record id (UUID4 text)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _iso(value: Optional[Any]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


class UserModel(Base):
    """SQLAlchemy model for user accounts."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum("admin", "department", name="user_role"),
        nullable=False,
        default="department",
        index=True,
    )
    title_prefix = Column(String(50), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    position = Column(String(100), nullable=True)
    department = Column(String(100), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    @property
    def display_name(self) -> str:
        return f"{self.title_prefix or ''}{self.first_name or ''} {self.last_name or ''}".strip()

    def summary(self) -> Dict[str, Any]:
        """Creator summary embedded in owned records."""
        return {
            "name": self.display_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "title_prefix": self.title_prefix,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary (never includes the password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "title_prefix": self.title_prefix,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "position": self.position,
            "department": self.department,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class StrategicIssueModel(Base):
    """SQLAlchemy model for strategic issues."""

    __tablename__ = "strategic_issues"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False, default=1)
    status = Column(
        Enum("active", "inactive", "completed", name="strategic_issue_status"),
        nullable=False,
        default="active",
        index=True,
    )
    created_by = Column(String(36), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    creator = relationship(
        "UserModel",
        primaryjoin="foreign(StrategicIssueModel.created_by) == UserModel.id",
        viewonly=True,
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_strategic_issues_years", "start_year", "end_year"),
        Index("ix_strategic_issues_order", "order"),
    )

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "order": self.order,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "order": self.order,
            "status": self.status,
            "created_by": self.created_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "creator": self.creator.summary() if self.creator else None,
        }


class StrategyModel(Base):
    """SQLAlchemy model for strategies."""

    __tablename__ = "strategies"

    id = Column(String(36), primary_key=True, default=generate_id)
    # Weak reference: parent deletion is cascaded by StrategicIssueService
    strategic_issue_id = Column(String(36), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=1)
    created_by = Column(String(36), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    strategic_issue = relationship(
        "StrategicIssueModel",
        primaryjoin="foreign(StrategyModel.strategic_issue_id) == StrategicIssueModel.id",
        viewonly=True,
        lazy="joined",
    )
    creator = relationship(
        "UserModel",
        primaryjoin="foreign(StrategyModel.created_by) == UserModel.id",
        viewonly=True,
        lazy="joined",
    )

    __table_args__ = (Index("ix_strategies_order", "order"),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "strategic_issue_id": self.strategic_issue_id,
            "name": self.name,
            "description": self.description,
            "order": self.order,
            "created_by": self.created_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "strategic_issue": (
                self.strategic_issue.summary() if self.strategic_issue else None
            ),
            "creator": self.creator.summary() if self.creator else None,
        }


class ProjectModel(Base):
    """SQLAlchemy model for projects."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    key_activities = Column(Text, nullable=True)
    expected_results = Column(Text, nullable=True)
    budget = Column(Float, nullable=True)
    project_type = Column(
        Enum("new", "continuous", name="project_type"),
        nullable=False,
        default="new",
        index=True,
    )
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True, index=True)

    # Responsible person
    responsible_title_prefix = Column(String(50), nullable=True)
    responsible_first_name = Column(String(100), nullable=True)
    responsible_last_name = Column(String(100), nullable=True)
    responsible_position = Column(String(100), nullable=True)
    responsible_phone = Column(String(20), nullable=True)
    responsible_email = Column(String(100), nullable=True)

    # Location
    activity_location = Column(Text, nullable=True)
    districts = Column(JSON, nullable=False, default=list)
    province = Column(String(50), nullable=True)

    # Weak references (arrays of ids, not foreign keys)
    strategic_issues = Column(JSON, nullable=False, default=list)
    strategies = Column(JSON, nullable=False, default=list)

    document_links = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum("planning", "active", "completed", "cancelled", name="project_status"),
        nullable=False,
        default="planning",
        index=True,
    )
    created_by = Column(String(36), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    creator = relationship(
        "UserModel",
        primaryjoin="foreign(ProjectModel.created_by) == UserModel.id",
        viewonly=True,
        lazy="joined",
    )

    __table_args__ = (Index("ix_projects_status_type", "status", "project_type"),)

    @property
    def responsible_person(self) -> str:
        parts = [
            f"{self.responsible_title_prefix or ''}{self.responsible_first_name or ''}",
            self.responsible_last_name or "",
        ]
        return " ".join(p for p in parts if p).strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary (association ids left unresolved)."""
        return {
            "id": self.id,
            "name": self.name,
            "key_activities": self.key_activities,
            "expected_results": self.expected_results,
            "budget": self.budget if self.budget is not None else 0,
            "project_type": self.project_type,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "responsible_title_prefix": self.responsible_title_prefix,
            "responsible_first_name": self.responsible_first_name,
            "responsible_last_name": self.responsible_last_name,
            "responsible_position": self.responsible_position,
            "responsible_phone": self.responsible_phone,
            "responsible_email": self.responsible_email,
            "responsible_person": self.responsible_person,
            "activity_location": self.activity_location,
            "districts": self.districts if isinstance(self.districts, list) else [],
            "province": self.province,
            "strategic_issues": self.strategic_issues,
            "strategies": self.strategies,
            "document_links": (
                self.document_links if isinstance(self.document_links, list) else []
            ),
            "status": self.status,
            "created_by": self.created_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "creator": self.creator.summary() if self.creator else None,
        }


def period_is_valid(start: Optional[Any], end: Optional[Any]) -> bool:
    """Return False only when both ends are set and end precedes start."""
    if start is None or end is None:
        return True
    return end >= start
