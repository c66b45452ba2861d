"""Pydantic schemas for accounts and the caller's own profile."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from timekeeper.core.permissions import ROLES


def normalise_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Valid email is required")
    return v


def validate_role(v: str) -> str:
    if v not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(sorted(ROLES))}")
    return v


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=72)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)


class UserRead(BaseModel):
    id: int
    email: str
    role: str
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class ProfileRead(UserRead):
    employee_id: int | None = None
    employee_code: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    department: str | None = None
    position: str | None = None
    hire_date: date | None = None


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=30)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=72)
