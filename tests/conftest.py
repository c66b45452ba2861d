"""
Shared test fixtures for the Timekeeper test suite.

Async throughout (aiosqlite + AsyncSession). Every test gets fresh tables,
a pinned clock and real bearer tokens for the accounts it creates.
"""

import os
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["TIMEZONE_OFFSET"] = "+00:00"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from timekeeper.api.v1.deps import get_now
from timekeeper.core.security import create_access_token
from timekeeper.db.session import Database
from timekeeper.main import create_app
from timekeeper.models.employee import Employee
from timekeeper.models.user import User

test_database = Database(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

app = create_app(test_database)


@dataclass
class Clock:
    now: datetime = field(
        default_factory=lambda: datetime(2024, 10, 7, 7, 30, tzinfo=timezone.utc)
    )

    def set(self, *args: int) -> datetime:
        self.now = datetime(*args, tzinfo=timezone.utc)
        return self.now


@dataclass
class Account:
    user: User
    employee: Employee | None
    headers: dict[str, str]


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    await test_database.create_all()
    yield
    await test_database.drop_all()


@pytest.fixture
def clock() -> Clock:
    """Pinned 'now' seen by every endpoint; tests move it with ``clock.set``."""
    pinned = Clock()
    app.dependency_overrides[get_now] = lambda: pinned.now
    yield pinned
    app.dependency_overrides.pop(get_now, None)


@pytest.fixture
async def async_client(clock: Clock) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with test_database.session_factory() as session:
        yield session


@pytest.fixture
def make_account(db_session: AsyncSession) -> Callable[..., Awaitable[Account]]:
    """Factory: create an account (and by default its employee record)."""
    counter = {"n": 0}

    async def _make(
        role: str = "employee",
        with_employee: bool = True,
        first_name: str = "Test",
        hashed_password: str = "not-a-real-hash",
    ) -> Account:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"{role}{n}@example.com",
            hashed_password=hashed_password,
            role=role,
            is_active=True,
        )
        db_session.add(user)
        await db_session.flush()

        employee = None
        if with_employee:
            employee = Employee(
                user_id=user.id,
                employee_code=f"EMP{n:03d}",
                first_name=first_name,
                last_name=f"User{n}",
                department="Engineering",
                position="Developer",
                hire_date=date(2023, 1, 2),
                salary=0,
                status="active",
            )
            db_session.add(employee)
        await db_session.commit()

        token = create_access_token(user.id, role=role)
        return Account(
            user=user,
            employee=employee,
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


@pytest.fixture
async def employee(make_account) -> Account:
    return await make_account("employee", first_name="Eve")


@pytest.fixture
async def hr(make_account) -> Account:
    return await make_account("hr", first_name="Hana")
