"""
Attendance endpoints — check-in, check-out and the caller's own history.

Every route resolves the calling account to its employee record first.
At most one record exists per employee per local calendar day; the
``uq_attendance_emp_day`` constraint backs that up under concurrent taps.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.api.v1.deps import get_current_employee, get_db, get_now
from timekeeper.core.config import settings
from timekeeper.core.exceptions import AlreadyCheckedIn, NoOpenCheckIn, ValidationError
from timekeeper.core.worktime import (append_notes, check_in_status, ensure_utc,
                                      local_day, overtime_hours,
                                      work_hours_between)
from timekeeper.models.attendance import AttendanceRecord
from timekeeper.models.employee import Employee
from timekeeper.schemas.attendance import (AttendanceRead, CheckInResponse,
                                           CheckOutResponse, CheckRequest,
                                           HistoryResponse, MonthlyStats,
                                           TodayResponse)

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


async def _record_for_day(
    db: AsyncSession, employee_id: int, day: str, open_only: bool = False
) -> AttendanceRecord | None:
    query = select(AttendanceRecord).where(
        AttendanceRecord.employee_id == employee_id,
        AttendanceRecord.work_date == day,
    )
    if open_only:
        query = query.where(AttendanceRecord.check_out_time.is_(None))
    result = await db.execute(query.with_for_update())
    return result.scalar_one_or_none()


# ── Check-in ────────────────────────────────────────────────────────
@router.post("/check-in", response_model=CheckInResponse)
async def check_in(
    body: CheckRequest,
    employee: Employee = Depends(get_current_employee),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
) -> CheckInResponse:
    tz = settings.local_tz
    today = local_day(now, tz)
    employee_id = employee.id

    if await _record_for_day(db, employee_id, today) is not None:
        raise AlreadyCheckedIn()

    status = check_in_status(now, tz, settings.WORK_START_HOUR)
    record = AttendanceRecord(
        employee_id=employee_id,
        work_date=today,
        check_in_time=now,
        check_in_location=body.location,
        check_in_latitude=body.latitude,
        check_in_longitude=body.longitude,
        check_in_method=body.method,
        status=status,
        notes=body.notes or None,
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request for the same employee won the race
        await db.rollback()
        logger.info("Duplicate check-in rejected for employee %d on %s", employee_id, today)
        raise AlreadyCheckedIn()
    await db.refresh(record)

    logger.info(
        "Check-in %s for employee %s (%s)", status, employee.employee_code, today
    )
    return CheckInResponse(
        message="Check in successful",
        attendance_id=record.id,
        status=status,
        check_in_time=now,
    )


# ── Check-out ───────────────────────────────────────────────────────
@router.post("/check-out", response_model=CheckOutResponse)
async def check_out(
    body: CheckRequest,
    employee: Employee = Depends(get_current_employee),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
) -> CheckOutResponse:
    today = local_day(now, settings.local_tz)

    record = await _record_for_day(db, employee.id, today, open_only=True)
    if record is None:
        raise NoOpenCheckIn()

    hours = work_hours_between(record.check_in_time, now)
    overtime = overtime_hours(hours, settings.STANDARD_WORK_HOURS)

    record.check_out_time = now
    record.check_out_location = body.location
    record.check_out_latitude = body.latitude
    record.check_out_longitude = body.longitude
    record.check_out_method = body.method
    record.work_hours = round(hours, 2)
    record.overtime_hours = round(overtime, 2)
    record.notes = append_notes(record.notes, body.notes)
    await db.commit()

    logger.info(
        "Check-out for employee %s (%s): %.2fh worked, %.2fh overtime",
        employee.employee_code,
        today,
        hours,
        overtime,
    )
    return CheckOutResponse(
        message="Check out successful",
        attendance_id=record.id,
        check_out_time=now,
        work_hours=record.work_hours,
        overtime_hours=record.overtime_hours,
    )


# ── Queries ─────────────────────────────────────────────────────────
@router.get("/today", response_model=TodayResponse)
async def today_attendance(
    employee: Employee = Depends(get_current_employee),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
) -> TodayResponse:
    """Whether the caller has checked in / out today, with the record."""
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee.id,
            AttendanceRecord.work_date == local_day(now, settings.local_tz),
        )
    )
    record = result.scalar_one_or_none()
    if record is None:
        return TodayResponse(is_checked_in=False)
    return TodayResponse(
        is_checked_in=True,
        is_checked_out=record.check_out_time is not None,
        attendance=AttendanceRead.model_validate(record),
    )


@router.get("/history", response_model=HistoryResponse)
async def attendance_history(
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
) -> HistoryResponse:
    """Caller's records, newest first, optionally within an inclusive date range."""
    conditions = [AttendanceRecord.employee_id == employee.id]
    if (start_date is None) != (end_date is None):
        missing = "end_date" if end_date is None else "start_date"
        raise ValidationError(
            "start_date and end_date must be supplied together",
            errors=[{"field": missing, "message": "required when the other bound is given"}],
        )
    if start_date is not None and end_date is not None:
        if start_date > end_date:
            raise ValidationError(
                "start_date must not be after end_date",
                errors=[{"field": "start_date", "message": "must not be after end_date"}],
            )
        conditions.append(
            AttendanceRecord.work_date.between(start_date.isoformat(), end_date.isoformat())
        )

    total = await db.scalar(select(func.count(AttendanceRecord.id)).where(*conditions))
    result = await db.execute(
        select(AttendanceRecord)
        .where(*conditions)
        .order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return HistoryResponse(
        attendance=[AttendanceRead.model_validate(r) for r in result.scalars().all()],
        total=total or 0,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=MonthlyStats)
async def attendance_stats(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1970, le=9999),
    employee: Employee = Depends(get_current_employee),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
) -> MonthlyStats:
    """Monthly totals for the caller; defaults to the current local month."""
    local_now = ensure_utc(now).astimezone(settings.local_tz)
    month = month or local_now.month
    year = year or local_now.year

    result = await db.execute(
        select(
            func.count(AttendanceRecord.id),
            func.count(case((AttendanceRecord.status == "present", 1))),
            func.count(case((AttendanceRecord.status == "late", 1))),
            func.avg(AttendanceRecord.work_hours),
            func.sum(AttendanceRecord.work_hours),
            func.sum(AttendanceRecord.overtime_hours),
        ).where(
            AttendanceRecord.employee_id == employee.id,
            AttendanceRecord.work_date.like(f"{year:04d}-{month:02d}-%"),
        )
    )
    total, present, late, avg_hours, sum_hours, sum_overtime = result.one()

    return MonthlyStats(
        month=month,
        year=year,
        total_days=total or 0,
        present_days=present or 0,
        late_days=late or 0,
        avg_work_hours=round(float(avg_hours or 0), 2),
        total_work_hours=round(float(sum_hours or 0), 2),
        total_overtime_hours=round(float(sum_overtime or 0), 2),
    )
