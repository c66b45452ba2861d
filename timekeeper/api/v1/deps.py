"""
FastAPI dependencies — database session, clock, auth guards and the
account → employee lookup every self-service endpoint starts with.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Coroutine
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.core.exceptions import Forbidden, NotFound
from timekeeper.core.permissions import Permission, has_permission
from timekeeper.core.security import decode_access_token
from timekeeper.models.employee import Employee
from timekeeper.models.user import User

# We use auto_error=False so we can manually check for the cookie if header is missing
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.db.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Clock ───────────────────────────────────────────────────────────
def get_now() -> datetime:
    """Current UTC time; overridden in tests to pin the clock."""
    return datetime.now(timezone.utc)


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode JWT from Header OR Cookie, look up the account."""

    # Priority: Header > Cookie
    final_token = token
    if not final_token and access_token:
        if access_token.startswith("Bearer "):
            final_token = access_token.split(" ", 1)[1]
        else:
            final_token = access_token

    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None:
        raise credentials_exc

    user_id: str | None = payload.get("sub")
    if user_id is None or not user_id.isdigit():
        raise credentials_exc

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exc
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject deactivated accounts."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive user account",
        )
    return current_user


def require_permission(
    permission: Permission,
) -> Callable[..., Coroutine[Any, Any, User]]:
    """Build a dependency that lets through only roles holding *permission*."""

    async def _guard(current_user: User = Depends(get_current_active_user)) -> User:
        if not has_permission(current_user.role, permission):
            raise Forbidden()
        return current_user

    _guard.__name__ = f"require_{permission.value}"
    return _guard


# ── Employee directory ──────────────────────────────────────────────
async def resolve_employee(db: AsyncSession, user_id: int) -> Employee:
    result = await db.execute(select(Employee).where(Employee.user_id == user_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFound("Employee not found")
    return employee


async def get_current_employee(
    current_user: User = Depends(require_permission(Permission.SELF_SERVICE)),
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """The employee record linked to the calling account."""
    return await resolve_employee(db, current_user.id)
