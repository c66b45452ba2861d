"""
Employee directory CRUD.

All routes require the ``manage_employees`` permission (admin / HR).
Creating or updating an employee touches both the account and the
employee row; both writes commit together or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.api.v1.deps import get_db, get_now, require_permission
from timekeeper.core.config import settings
from timekeeper.core.exceptions import Conflict, NotFound
from timekeeper.core.permissions import Permission
from timekeeper.core.security import get_password_hash
from timekeeper.core.worktime import ensure_utc
from timekeeper.models.employee import Employee
from timekeeper.models.user import User
from timekeeper.schemas.common import MessageResponse
from timekeeper.schemas.employee import (EmployeeCreate, EmployeeList,
                                         EmployeeRead, EmployeeUpdate)

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)

_ACCOUNT_FIELDS = {"email", "role"}
_NULLABLE_FIELDS = {"phone", "address", "emergency_contact", "birth_date", "gender"}


def _to_read(employee: Employee, user: User | None) -> EmployeeRead:
    data = EmployeeRead.model_validate(employee)
    if user is not None:
        data.email = user.email
        data.role = user.role
    return data


async def _get_with_account(db: AsyncSession, employee_id: int) -> tuple[Employee, User]:
    result = await db.execute(
        select(Employee, User)
        .join(User, Employee.user_id == User.id)
        .where(Employee.id == employee_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Employee not found")
    return row[0], row[1]


async def _email_taken(db: AsyncSession, email: str, exclude_user_id: int | None = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    return (await db.execute(query)).first() is not None


@router.get("", response_model=EmployeeList)
async def list_employees(
    status: str | None = "active",
    department: str | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_permission(Permission.MANAGE_EMPLOYEES)),
) -> EmployeeList:
    """List employees; ``status=`` (empty) lists every status."""
    query = select(Employee, User).join(User, Employee.user_id == User.id)
    if status:
        query = query.where(Employee.status == status)
    if department:
        query = query.where(Employee.department == department)
    query = query.order_by(Employee.first_name, Employee.id).offset(skip).limit(limit)

    result = await db.execute(query)
    employees = [_to_read(emp, user) for emp, user in result.all()]
    return EmployeeList(employees=employees, total=len(employees))


@router.get("/{employee_id}", response_model=EmployeeRead)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_permission(Permission.MANAGE_EMPLOYEES)),
) -> EmployeeRead:
    employee, user = await _get_with_account(db, employee_id)
    return _to_read(employee, user)


@router.post("", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_permission(Permission.MANAGE_EMPLOYEES)),
) -> EmployeeRead:
    """Create the account and its employee profile in one transaction."""
    if await _email_taken(db, body.email):
        raise Conflict("Email already exists")
    existing = await db.execute(
        select(Employee.id).where(Employee.employee_code == body.employee_code)
    )
    if existing.first() is not None:
        raise Conflict("Employee ID already exists")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        role=body.role,
        is_active=True,
    )
    profile = body.model_dump(exclude={"email", "password", "role"})
    profile["hire_date"] = profile["hire_date"] or ensure_utc(now).astimezone(settings.local_tz).date()
    try:
        db.add(user)
        await db.flush()
        employee = Employee(user_id=user.id, status="active", **profile)
        db.add(employee)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Email or employee ID already exists")
    except Exception:
        await db.rollback()
        raise

    await db.refresh(employee)
    logger.info("Created employee %s (%s)", employee.employee_code, user.email)
    return _to_read(employee, user)


@router.put("/{employee_id}", response_model=EmployeeRead)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_permission(Permission.MANAGE_EMPLOYEES)),
) -> EmployeeRead:
    """Update the employee profile and, if given, the account's email / role."""
    employee, user = await _get_with_account(db, employee_id)
    changes = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in _NULLABLE_FIELDS
    }

    # Terminated is terminal
    if employee.status == "terminated" and changes.get("status", "terminated") != "terminated":
        raise Conflict("Employee is terminated")

    new_email = changes.get("email")
    if new_email and await _email_taken(db, new_email, exclude_user_id=user.id):
        raise Conflict("Email already exists")

    try:
        for field, value in changes.items():
            if field in _ACCOUNT_FIELDS:
                setattr(user, field, value)
            else:
                setattr(employee, field, value)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Email already exists")
    except Exception:
        await db.rollback()
        raise

    await db.refresh(employee)
    await db.refresh(user)
    logger.info("Updated employee %d: %s", employee_id, sorted(changes))
    return _to_read(employee, user)


@router.delete("/{employee_id}", response_model=MessageResponse)
async def terminate_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_permission(Permission.MANAGE_EMPLOYEES)),
) -> MessageResponse:
    """Mark the employee terminated. The row and its history are kept."""
    result = await db.execute(select(Employee).where(Employee.id == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFound("Employee not found")

    employee.status = "terminated"
    await db.commit()
    logger.info("Terminated employee %d (%s)", employee_id, employee.employee_code)
    return MessageResponse(message="Employee terminated successfully")
