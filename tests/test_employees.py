"""Tests for employee directory CRUD endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from timekeeper.models.employee import Employee
from timekeeper.models.user import User

EMPLOYEES = "/api/v1/employees"


def _payload(**overrides):
    body = {
        "email": "bob@example.com",
        "password": "secret123",
        "role": "employee",
        "employee_code": "BOB-001",
        "first_name": "Bob",
        "last_name": "Jones",
        "department": "Engineering",
        "position": "Developer",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_employee(async_client: AsyncClient, clock, hr):
    """POST /employees should create the account and the employee together."""
    clock.set(2024, 10, 7, 9, 0)
    resp = await async_client.post(EMPLOYEES, json=_payload(salary="4500.50"), headers=hr.headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["first_name"] == "Bob"
    assert data["employee_code"] == "BOB-001"
    assert data["email"] == "bob@example.com"
    assert data["role"] == "employee"
    assert data["status"] == "active"
    assert data["hire_date"] == "2024-10-07"
    assert data["salary"] == pytest.approx(4500.5)


@pytest.mark.asyncio
async def test_created_employee_can_log_in(async_client: AsyncClient, hr):
    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)
    resp = await async_client.post(
        "/api/v1/auth/login", data={"username": "bob@example.com", "password": "secret123"}
    )
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    me = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["employee_code"] == "BOB-001"


@pytest.mark.asyncio
async def test_create_duplicate_email_rejected(async_client: AsyncClient, hr, db_session):
    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)
    resp = await async_client.post(
        EMPLOYEES, json=_payload(employee_code="BOB-002"), headers=hr.headers
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Email already exists"


@pytest.mark.asyncio
async def test_create_duplicate_code_rejected_without_partial_account(
    async_client: AsyncClient, hr, db_session
):
    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)
    resp = await async_client.post(
        EMPLOYEES, json=_payload(email="other@example.com"), headers=hr.headers
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Employee ID already exists"

    orphan = await db_session.scalar(
        select(func.count(User.id)).where(User.email == "other@example.com")
    )
    assert orphan == 0


@pytest.mark.asyncio
async def test_failed_employee_insert_rolls_back_account(
    async_client: AsyncClient, hr, db_session, monkeypatch
):
    """A constraint failure on the employee row must not leave the account behind."""
    from timekeeper.api.v1.endpoints import employees as employee_endpoints

    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)

    # Let the duplicate code slip past the pre-check so the insert itself fails
    real_execute = employee_endpoints.AsyncSession.execute

    async def _code_check_misses(self, statement, *args, **kwargs):
        result = await real_execute(self, statement, *args, **kwargs)
        if "employee_code" in str(statement) and "SELECT employees.id" in str(statement):
            return await real_execute(self, select(Employee.id).where(Employee.id == -1))
        return result

    monkeypatch.setattr(employee_endpoints.AsyncSession, "execute", _code_check_misses)
    resp = await async_client.post(
        EMPLOYEES, json=_payload(email="late@example.com"), headers=hr.headers
    )
    monkeypatch.undo()

    assert resp.status_code == 409
    count = await db_session.scalar(
        select(func.count(User.id)).where(User.email == "late@example.com")
    )
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "not-an-email"},
        {"password": "123"},
        {"role": "superuser"},
        {"employee_code": ""},
        {"first_name": "   "},
        {"department": ""},
    ],
)
async def test_create_validation(async_client: AsyncClient, hr, overrides):
    resp = await async_client.post(EMPLOYEES, json=_payload(**overrides), headers=hr.headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_employees(async_client: AsyncClient, hr):
    """GET /employees should return active employees with their account email."""
    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)
    resp = await async_client.get(EMPLOYEES, headers=hr.headers)
    assert resp.status_code == 200
    data = resp.json()
    emails = {e["email"] for e in data["employees"]}
    assert "bob@example.com" in emails
    assert data["total"] == len(data["employees"])


@pytest.mark.asyncio
async def test_list_employees_filters(async_client: AsyncClient, hr):
    await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)
    await async_client.post(
        EMPLOYEES,
        json=_payload(email="sue@example.com", employee_code="SUE-001", first_name="Sue", department="Sales"),
        headers=hr.headers,
    )
    resp = await async_client.get(f"{EMPLOYEES}?department=Sales", headers=hr.headers)
    assert [e["first_name"] for e in resp.json()["employees"]] == ["Sue"]


@pytest.mark.asyncio
async def test_list_employees_pagination(async_client: AsyncClient, hr):
    for i in range(5):
        await async_client.post(
            EMPLOYEES,
            json=_payload(email=f"p{i}@example.com", employee_code=f"PAGE-{i:03d}"),
            headers=hr.headers,
        )
    resp = await async_client.get(f"{EMPLOYEES}?skip=2&limit=2", headers=hr.headers)
    assert resp.status_code == 200
    assert len(resp.json()["employees"]) == 2


@pytest.mark.asyncio
async def test_get_employee_by_id(async_client: AsyncClient, hr):
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    resp = await async_client.get(f"{EMPLOYEES}/{eid}", headers=hr.headers)
    assert resp.status_code == 200
    assert resp.json()["first_name"] == "Bob"


@pytest.mark.asyncio
async def test_get_employee_not_found(async_client: AsyncClient, hr):
    resp = await async_client.get(f"{EMPLOYEES}/9999", headers=hr.headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_employee_and_account(async_client: AsyncClient, hr):
    """PUT /employees/{id} updates profile fields and the linked account."""
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    resp = await async_client.put(
        f"{EMPLOYEES}/{eid}",
        json={"first_name": "Robert", "department": "Sales", "role": "manager", "email": "rob@example.com"},
        headers=hr.headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["first_name"] == "Robert"
    assert data["department"] == "Sales"
    assert data["role"] == "manager"
    assert data["email"] == "rob@example.com"
    assert data["last_name"] == "Jones"


@pytest.mark.asyncio
async def test_update_email_collision(async_client: AsyncClient, hr):
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    resp = await async_client.put(
        f"{EMPLOYEES}/{eid}", json={"email": hr.user.email}, headers=hr.headers
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_update_rejects_unknown_status(async_client: AsyncClient, hr):
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    resp = await async_client.put(f"{EMPLOYEES}/{eid}", json={"status": "retired"}, headers=hr.headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_terminate_keeps_row(async_client: AsyncClient, hr):
    """DELETE /employees/{id} marks the employee terminated; the row stays."""
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    resp = await async_client.delete(f"{EMPLOYEES}/{eid}", headers=hr.headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    fetched = await async_client.get(f"{EMPLOYEES}/{eid}", headers=hr.headers)
    assert fetched.status_code == 200
    assert fetched.json()["status"] == "terminated"

    active = await async_client.get(EMPLOYEES, headers=hr.headers)
    assert eid not in [e["id"] for e in active.json()["employees"]]

    terminated = await async_client.get(f"{EMPLOYEES}?status=terminated", headers=hr.headers)
    assert [e["id"] for e in terminated.json()["employees"]] == [eid]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["active", "inactive"])
async def test_terminated_employee_cannot_be_reactivated(async_client: AsyncClient, hr, status):
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    await async_client.delete(f"{EMPLOYEES}/{eid}", headers=hr.headers)

    resp = await async_client.put(f"{EMPLOYEES}/{eid}", json={"status": status}, headers=hr.headers)
    assert resp.status_code == 409

    fetched = await async_client.get(f"{EMPLOYEES}/{eid}", headers=hr.headers)
    assert fetched.json()["status"] == "terminated"


@pytest.mark.asyncio
async def test_terminated_employee_profile_still_editable(async_client: AsyncClient, hr):
    eid = (await async_client.post(EMPLOYEES, json=_payload(), headers=hr.headers)).json()["id"]
    await async_client.delete(f"{EMPLOYEES}/{eid}", headers=hr.headers)

    resp = await async_client.put(
        f"{EMPLOYEES}/{eid}", json={"phone": "555-0100", "status": "terminated"}, headers=hr.headers
    )
    assert resp.status_code == 200
    assert resp.json()["phone"] == "555-0100"
    assert resp.json()["status"] == "terminated"


@pytest.mark.asyncio
async def test_terminate_missing_employee(async_client: AsyncClient, hr):
    resp = await async_client.delete(f"{EMPLOYEES}/9999", headers=hr.headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["employee", "manager"])
async def test_directory_forbidden_for_non_hr_roles(async_client: AsyncClient, make_account, role):
    account = await make_account(role)
    assert (await async_client.get(EMPLOYEES, headers=account.headers)).status_code == 403
    resp = await async_client.post(EMPLOYEES, json=_payload(), headers=account.headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_admin_can_manage_directory(async_client: AsyncClient, make_account):
    admin = await make_account("admin", with_employee=False)
    resp = await async_client.post(EMPLOYEES, json=_payload(), headers=admin.headers)
    assert resp.status_code == 201
