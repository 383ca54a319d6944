"""User account request schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator, model_validator

from ..auth.permissions import Role
from .primitives import EMAIL_PATTERN, reject_nulls

Email = constr(strip_whitespace=True, to_lower=True, max_length=255, pattern=EMAIL_PATTERN)
Name = constr(strip_whitespace=True, min_length=1, max_length=100)


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    email: Email
    password: constr(min_length=1, max_length=255)


class UserCreate(BaseModel):
    """Schema for creating a user (admin only)."""

    model_config = ConfigDict(extra="ignore")

    email: Email = Field(..., description="Login email, unique")
    password: constr(min_length=1, max_length=255) = Field(
        ..., description="Initial password"
    )
    role: Role = Field(Role.DEPARTMENT)
    title_prefix: Optional[constr(strip_whitespace=True, max_length=50)] = None
    first_name: Name
    last_name: Name
    position: Optional[constr(strip_whitespace=True, max_length=100)] = None
    department: Optional[constr(strip_whitespace=True, max_length=100)] = None


class UserUpdate(BaseModel):
    """Partial update; password and activation have their own endpoints."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[Email] = None
    role: Optional[Role] = None
    title_prefix: Optional[constr(strip_whitespace=True, max_length=50)] = None
    first_name: Optional[Name] = None
    last_name: Optional[Name] = None
    position: Optional[constr(strip_whitespace=True, max_length=100)] = None
    department: Optional[constr(strip_whitespace=True, max_length=100)] = None

    @model_validator(mode="after")
    def _check_nulls(self) -> "UserUpdate":
        reject_nulls(self, ("email", "role", "first_name", "last_name"))
        return self


class PasswordChange(BaseModel):
    """Body of the change-password endpoint."""

    current_password: Optional[str] = Field(
        None, description="Required unless an admin changes another user's password"
    )
    new_password: str = Field(..., description="Replacement password")

    @field_validator("new_password")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("new_password cannot be blank")
        return value
