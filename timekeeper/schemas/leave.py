"""Pydantic schemas for leave requests."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

LeaveType = Literal["annual", "sick", "personal", "emergency"]
LeaveDecision = Literal["approved", "rejected"]
LeaveStatus = Literal["pending", "approved", "rejected"]


class LeaveCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _check_range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaveDecide(BaseModel):
    action: LeaveDecision
    rejection_reason: str | None = Field(default=None, max_length=2000)


class LeaveRead(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    days_requested: int
    reason: str | None
    status: str
    approved_by: int | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime | None
    # joined from employees table
    employee_code: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    model_config = {"from_attributes": True}


class LeaveList(BaseModel):
    success: bool = True
    requests: list[LeaveRead]
