"""Strategy request schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr, model_validator

from .primitives import reject_nulls


class StrategyCreate(BaseModel):
    """Schema for creating a strategy under a strategic issue."""

    model_config = ConfigDict(extra="ignore")

    strategic_issue_id: constr(strip_whitespace=True, min_length=1, max_length=36) = Field(
        ..., description="Parent strategic issue (not enforced)"
    )
    name: constr(strip_whitespace=True, min_length=3, max_length=255) = Field(
        ..., description="Strategy name"
    )
    description: Optional[constr(strip_whitespace=True, max_length=2000)] = None
    order: Optional[conint(ge=1)] = Field(
        None, description="Manual rank; appended to the issue when omitted"
    )


class StrategyUpdate(BaseModel):
    """Partial update; fields not listed here are ignored."""

    model_config = ConfigDict(extra="ignore")

    strategic_issue_id: Optional[
        constr(strip_whitespace=True, min_length=1, max_length=36)
    ] = None
    name: Optional[constr(strip_whitespace=True, min_length=3, max_length=255)] = None
    description: Optional[constr(strip_whitespace=True, max_length=2000)] = None
    order: Optional[conint(ge=1)] = None

    @model_validator(mode="after")
    def _check_nulls(self) -> "StrategyUpdate":
        reject_nulls(self, ("name", "order"))
        return self
