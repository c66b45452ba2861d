"""
Auth endpoints — login (OAuth2 password flow), registration, token refresh
and the caller's own profile / password.
"""

from __future__ import annotations

import logging

from fastapi import (APIRouter, Cookie, Depends, HTTPException, Request,
                     Response, status)
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.api.v1.deps import (get_current_active_user,
                                    get_current_employee, get_db)
from timekeeper.core.config import settings
from timekeeper.core.exceptions import Conflict, ValidationError
from timekeeper.core.security import (create_access_token,
                                      create_refresh_token,
                                      decode_refresh_token, get_password_hash,
                                      verify_password)
from timekeeper.models.employee import Employee
from timekeeper.models.user import User
from timekeeper.schemas.common import MessageResponse
from timekeeper.schemas.token import RefreshRequest, Token
from timekeeper.schemas.user import (PasswordChange, ProfileRead,
                                     ProfileUpdate, RegisterRequest, UserRead)

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _issue_tokens(response: Response, user: User) -> Token:
    access_token = create_access_token(user.id, role=user.role)
    refresh_token = create_refresh_token(user.id)
    _set_auth_cookies(response, access_token, refresh_token)
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
async def login_for_access_token(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Authenticate with email/password. Tokens are also set as HttpOnly cookies."""
    result = await db.execute(
        select(User).where(User.email == form_data.username.lower().strip())
    )
    user = result.scalar_one_or_none()

    if (
        user is None
        or not user.is_active
        or not verify_password(form_data.password, user.hashed_password)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("User %d logged in", user.id)
    return _issue_tokens(response, user)


@router.post("/register", response_model=Token, status_code=201)
@limiter.limit("5/minute")
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Self-registration. New accounts always get the ``employee`` role."""
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.first() is not None:
        raise Conflict("User already exists")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        role="employee",
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered account %d (%s)", user.id, user.email)
    return _issue_tokens(response, user)


@router.post("/refresh", response_model=Token)
@limiter.limit("10/minute")
async def refresh_access_token_endpoint(
    request: Request,
    response: Response,
    body: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(None, alias="refresh_token"),
    db: AsyncSession = Depends(get_db),
) -> Token:
    # Priority: Body > Cookie
    token_str = body.refresh_token if body and body.refresh_token else refresh_token_cookie
    if not token_str:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
        )

    payload = decode_refresh_token(token_str)
    user_id = payload.get("sub") if payload else None
    if user_id is None or not str(user_id).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return _issue_tokens(response, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear auth cookies and end the session."""
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return MessageResponse(message="Logged out")


# ── Own profile ─────────────────────────────────────────────────────
@router.get("/me", response_model=ProfileRead)
async def read_current_user(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileRead:
    """Account details merged with the linked employee record, if any."""
    profile = ProfileRead.model_validate(current_user)
    result = await db.execute(select(Employee).where(Employee.user_id == current_user.id))
    employee = result.scalar_one_or_none()
    if employee is not None:
        profile.employee_id = employee.id
        profile.employee_code = employee.employee_code
        profile.first_name = employee.first_name
        profile.last_name = employee.last_name
        profile.phone = employee.phone
        profile.department = employee.department
        profile.position = employee.position
        profile.hire_date = employee.hire_date
    return profile


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    body: ProfileUpdate,
    employee: Employee = Depends(get_current_employee),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Employees may change their own name and phone number."""
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(employee, field, value)
    await db.commit()
    return MessageResponse(message="Profile updated successfully")


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if not verify_password(body.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect")

    current_user.hashed_password = get_password_hash(body.new_password)
    await db.commit()
    logger.info("Password changed for user %d", current_user.id)
    return MessageResponse(message="Password changed successfully")
