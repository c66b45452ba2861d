"""
Role-based access control.

Each operation names one permission; this table is the only place that
decides which roles hold it.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    ADMIN = "admin"


ROLES: frozenset[str] = frozenset(r.value for r in Role)


class Permission(str, Enum):
    MANAGE_EMPLOYEES = "manage_employees"
    DECIDE_LEAVE = "decide_leave"
    VIEW_ALL_LEAVE = "view_all_leave"
    SELF_SERVICE = "self_service"


_ALLOWED_ROLES: dict[Permission, frozenset[Role]] = {
    Permission.MANAGE_EMPLOYEES: frozenset({Role.ADMIN, Role.HR}),
    Permission.DECIDE_LEAVE: frozenset({Role.MANAGER, Role.HR, Role.ADMIN}),
    Permission.VIEW_ALL_LEAVE: frozenset({Role.MANAGER, Role.HR, Role.ADMIN}),
    Permission.SELF_SERVICE: frozenset(Role),
}


def has_permission(role: str | None, permission: Permission) -> bool:
    """Return True when *role* is on the allow-list for *permission*."""
    try:
        return Role(role) in _ALLOWED_ROLES[permission]
    except ValueError:
        return False
