"""
Leave request endpoints — submit, list and decide.

- Employees see only their own requests; managers, HR and admins see all.
- Only managers, HR and admins may approve or reject, and only while the
  request is still pending.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.api.v1.deps import (get_current_employee, get_db, get_now,
                                    require_permission)
from timekeeper.core.exceptions import AlreadyDecided, NotFound
from timekeeper.core.permissions import Permission, has_permission
from timekeeper.core.worktime import leave_days
from timekeeper.models.employee import Employee
from timekeeper.models.leave import LeaveRequest
from timekeeper.models.user import User
from timekeeper.schemas.leave import (LeaveCreate, LeaveDecide, LeaveList,
                                      LeaveRead, LeaveStatus)

router = APIRouter(prefix="/leaves", tags=["leaves"])
logger = logging.getLogger(__name__)


def _to_read(request: LeaveRequest, employee: Employee) -> LeaveRead:
    data = LeaveRead.model_validate(request)
    data.employee_code = employee.employee_code
    data.first_name = employee.first_name
    data.last_name = employee.last_name
    return data


@router.get("", response_model=LeaveList)
async def list_leave_requests(
    status: LeaveStatus | None = None,
    current_user: User = Depends(require_permission(Permission.SELF_SERVICE)),
    db: AsyncSession = Depends(get_db),
) -> LeaveList:
    """Newest first. Callers without ``view_all_leave`` only see their own."""
    query = select(LeaveRequest, Employee).join(
        Employee, LeaveRequest.employee_id == Employee.id
    )
    if not has_permission(current_user.role, Permission.VIEW_ALL_LEAVE):
        query = query.where(Employee.user_id == current_user.id)
    if status:
        query = query.where(LeaveRequest.status == status)
    query = query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())

    result = await db.execute(query)
    return LeaveList(requests=[_to_read(req, emp) for req, emp in result.all()])


@router.post("", response_model=LeaveRead, status_code=201)
async def submit_leave_request(
    body: LeaveCreate,
    employee: Employee = Depends(get_current_employee),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
) -> LeaveRead:
    request = LeaveRequest(
        employee_id=employee.id,
        leave_type=body.leave_type,
        start_date=body.start_date,
        end_date=body.end_date,
        days_requested=leave_days(body.start_date, body.end_date),
        reason=body.reason,
        status="pending",
        created_at=now,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)

    logger.info(
        "Leave request %d submitted by %s: %s, %d day(s)",
        request.id,
        employee.employee_code,
        request.leave_type,
        request.days_requested,
    )
    return _to_read(request, employee)


@router.put("/{request_id}/approve", response_model=LeaveRead)
async def decide_leave_request(
    request_id: int,
    body: LeaveDecide,
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
    approver: User = Depends(require_permission(Permission.DECIDE_LEAVE)),
) -> LeaveRead:
    """Approve or reject a pending request."""
    result = await db.execute(
        select(LeaveRequest, Employee)
        .join(Employee, LeaveRequest.employee_id == Employee.id)
        .where(LeaveRequest.id == request_id)
        .with_for_update()
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Leave request not found")
    request, employee = row

    if request.status != "pending":
        raise AlreadyDecided(f"Leave request already {request.status}")

    request.status = body.action
    request.approved_by = approver.id
    request.approved_at = now
    request.rejection_reason = body.rejection_reason if body.action == "rejected" else None
    await db.commit()
    await db.refresh(request)

    logger.info("Leave request %d %s by user %d", request_id, body.action, approver.id)
    return _to_read(request, employee)
