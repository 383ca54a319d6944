"""
Project request schemas.

``strategic_issues`` and ``strategies`` are lists of ids stored as weak
references; ``strategic_issue_ids`` and ``strategy_ids`` are accepted as
aliases in request bodies. Nothing checks that the ids resolve.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    confloat,
    constr,
    field_validator,
    model_validator,
)

from .enums import ProjectStatus, ProjectType
from .primitives import DocumentLink, check_period, coerce_date, reject_nulls

RecordId = constr(strip_whitespace=True, min_length=1, max_length=64)
District = constr(strip_whitespace=True, min_length=1, max_length=100)


class _ProjectFields(BaseModel):
    """Fields shared by create and update."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    key_activities: Optional[str] = None
    expected_results: Optional[str] = None
    budget: Optional[confloat(ge=0, allow_inf_nan=False)] = None
    project_type: Optional[ProjectType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    responsible_title_prefix: Optional[constr(max_length=50)] = None
    responsible_first_name: Optional[constr(max_length=100)] = None
    responsible_last_name: Optional[constr(max_length=100)] = None
    responsible_position: Optional[constr(max_length=100)] = None
    responsible_phone: Optional[constr(max_length=20)] = None
    responsible_email: Optional[constr(max_length=100)] = None

    activity_location: Optional[str] = None
    districts: Optional[List[District]] = None
    province: Optional[constr(max_length=50)] = None

    strategic_issues: Optional[List[RecordId]] = Field(
        None,
        validation_alias=AliasChoices("strategic_issues", "strategic_issue_ids"),
    )
    strategies: Optional[List[RecordId]] = Field(
        None,
        validation_alias=AliasChoices("strategies", "strategy_ids"),
    )
    document_links: Optional[List[DocumentLink]] = None
    status: Optional[ProjectStatus] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_dates(cls, value):
        return coerce_date(value)

    @model_validator(mode="after")
    def _check_period(self):
        check_period(self.start_date, self.end_date, "project")
        return self


class ProjectCreate(_ProjectFields):
    """Schema for creating a project."""

    name: constr(strip_whitespace=True, min_length=1, max_length=255) = Field(
        ..., description="Project name"
    )
    project_type: ProjectType = ProjectType.NEW
    status: ProjectStatus = ProjectStatus.PLANNING
    districts: List[District] = Field(default_factory=list)
    strategic_issues: List[RecordId] = Field(
        default_factory=list,
        validation_alias=AliasChoices("strategic_issues", "strategic_issue_ids"),
    )
    strategies: List[RecordId] = Field(
        default_factory=list,
        validation_alias=AliasChoices("strategies", "strategy_ids"),
    )
    document_links: List[DocumentLink] = Field(default_factory=list)


class ProjectUpdate(_ProjectFields):
    """Partial update; fields not listed here are ignored."""

    @model_validator(mode="after")
    def _check_nulls(self):
        reject_nulls(
            self,
            (
                "name",
                "project_type",
                "status",
                "districts",
                "strategic_issues",
                "strategies",
                "document_links",
            ),
        )
        return self
