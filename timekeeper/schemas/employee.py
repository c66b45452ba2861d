"""Pydantic schemas for the employee directory."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from timekeeper.schemas.user import normalise_email, validate_role

_CODE_RE = re.compile(r"^[A-Za-z0-9_-]{1,32}$")

EmployeeStatus = Literal["active", "inactive", "terminated"]
Gender = Literal["male", "female", "other"]


def _required_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class EmployeeCreate(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=72)
    role: str = "employee"
    employee_code: str
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    department: str = Field(max_length=100)
    position: str = Field(max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    hire_date: date | None = None
    salary: Decimal = Field(default=Decimal("0"), ge=0)
    address: str | None = Field(default=None, max_length=500)
    emergency_contact: str | None = Field(default=None, max_length=200)
    birth_date: date | None = None
    gender: Gender | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("role")
    @classmethod
    def _role(cls, v: str) -> str:
        return validate_role(v)

    @field_validator("employee_code")
    @classmethod
    def _code(cls, v: str) -> str:
        v = v.strip()
        if not _CODE_RE.match(v):
            raise ValueError("Employee code must be 1-32 alphanumeric chars (hyphens allowed)")
        return v

    @field_validator("first_name", "last_name", "department", "position")
    @classmethod
    def _text(cls, v: str) -> str:
        return _required_text(v)


class EmployeeUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    salary: Decimal | None = Field(default=None, ge=0)
    status: EmployeeStatus | None = None
    address: str | None = Field(default=None, max_length=500)
    emergency_contact: str | None = Field(default=None, max_length=200)
    birth_date: date | None = None
    gender: Gender | None = None
    # Account fields
    email: str | None = None
    role: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return normalise_email(v) if v is not None else v

    @field_validator("role")
    @classmethod
    def _role(cls, v: str | None) -> str | None:
        return validate_role(v) if v is not None else v

    @field_validator("first_name", "last_name", "department", "position")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return _required_text(v) if v is not None else v


class EmployeeRead(BaseModel):
    id: int
    user_id: int
    employee_code: str
    first_name: str
    last_name: str
    phone: str | None
    department: str
    position: str
    hire_date: date
    salary: float
    status: str
    address: str | None = None
    emergency_contact: str | None = None
    birth_date: date | None = None
    gender: str | None = None
    email: str | None = None  # joined from users table
    role: str | None = None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class EmployeeList(BaseModel):
    employees: list[EmployeeRead]
    total: int
