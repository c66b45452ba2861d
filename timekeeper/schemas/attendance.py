"""Pydantic schemas for check-in / check-out and attendance queries."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

CheckMethod = Literal["manual", "qr", "face", "location"]


# ── Check-in / check-out ────────────────────────────────────────────
class CheckRequest(BaseModel):
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    location: str | None = Field(default=None, max_length=255)
    method: CheckMethod = "manual"
    notes: str | None = Field(default=None, max_length=500)


class CheckInResponse(BaseModel):
    success: bool = True
    message: str
    attendance_id: int
    status: str
    check_in_time: datetime


class CheckOutResponse(BaseModel):
    success: bool = True
    message: str
    attendance_id: int
    check_out_time: datetime
    work_hours: float
    overtime_hours: float


# ── Records ─────────────────────────────────────────────────────────
class AttendanceRead(BaseModel):
    id: int
    employee_id: int
    work_date: str
    check_in_time: datetime
    check_in_location: str | None
    check_in_latitude: float | None
    check_in_longitude: float | None
    check_in_method: str
    check_out_time: datetime | None
    check_out_location: str | None
    check_out_latitude: float | None
    check_out_longitude: float | None
    check_out_method: str | None
    work_hours: float | None
    overtime_hours: float | None
    status: str
    notes: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class TodayResponse(BaseModel):
    is_checked_in: bool
    is_checked_out: bool = False
    attendance: AttendanceRead | None = None


class HistoryResponse(BaseModel):
    attendance: list[AttendanceRead]
    total: int
    limit: int
    offset: int


# ── Monthly statistics ──────────────────────────────────────────────
class MonthlyStats(BaseModel):
    month: int
    year: int
    total_days: int
    present_days: int
    late_days: int
    avg_work_hours: float
    total_work_hours: float
    total_overtime_hours: float
