"""
Strategic issue request schemas.

A strategic issue is the top level of the planning hierarchy. Its period is
expressed in Buddhist Era years.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr, model_validator

from .enums import StrategicIssueStatus
from .primitives import MAX_BE_YEAR, MIN_BE_YEAR, check_period, reject_nulls

BuddhistYear = conint(ge=MIN_BE_YEAR, le=MAX_BE_YEAR)


class StrategicIssueCreate(BaseModel):
    """Schema for creating a strategic issue."""

    model_config = ConfigDict(extra="ignore")

    title: constr(strip_whitespace=True, min_length=3, max_length=255) = Field(
        ..., description="Issue title"
    )
    description: Optional[constr(strip_whitespace=True, max_length=2000)] = Field(
        None, description="Detailed description"
    )
    start_year: BuddhistYear = Field(..., description="First year of the period (BE)")
    end_year: BuddhistYear = Field(..., description="Last year of the period (BE)")
    order: Optional[conint(ge=1)] = Field(
        None, description="Manual rank; appended to the period when omitted"
    )
    status: StrategicIssueStatus = Field(StrategicIssueStatus.ACTIVE)

    @model_validator(mode="after")
    def _check_period(self) -> "StrategicIssueCreate":
        check_period(self.start_year, self.end_year, "period")
        return self


class StrategicIssueUpdate(BaseModel):
    """Partial update; fields not listed here are ignored."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[constr(strip_whitespace=True, min_length=3, max_length=255)] = None
    description: Optional[constr(strip_whitespace=True, max_length=2000)] = None
    start_year: Optional[BuddhistYear] = None
    end_year: Optional[BuddhistYear] = None
    order: Optional[conint(ge=1)] = None
    status: Optional[StrategicIssueStatus] = None

    @model_validator(mode="after")
    def _check_nulls(self) -> "StrategicIssueUpdate":
        reject_nulls(self, ("title", "start_year", "end_year", "order", "status"))
        check_period(self.start_year, self.end_year, "period")
        return self
