"""
JWT token creation / verification and password hashing (bcrypt).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from timekeeper.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a recognised hash
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def _encode(claims: dict[str, Any], expires_delta: timedelta) -> str:
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(payload, _SECRET, algorithm=_ALGORITHM)


def create_access_token(
    subject: str | Any,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    claims: dict[str, Any] = {"sub": str(subject), "type": "access"}
    if role is not None:
        claims["role"] = role
    return _encode(
        claims,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(subject: str | Any) -> str:
    return _encode(
        {"sub": str(subject), "type": "refresh"},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def _decode(token: str, expected_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    return _decode(token, "access")


def decode_refresh_token(token: str) -> dict | None:
    """Return payload dict if *refresh* token is valid, else ``None``."""
    return _decode(token, "refresh")
