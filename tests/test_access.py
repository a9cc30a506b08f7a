"""Tests for per-route role sets in token mode."""

import pytest


ADMIN_ONLY_REQUESTS = [
    ("GET", "/api/users", None),
    ("POST", "/api/users", {"username": "x", "password": "y", "role": "School Nurse"}),
    ("GET", "/api/audit", None),
    ("PUT", "/api/settings", {"schoolName": "A", "supervisorName": "B"}),
    ("GET", "/api/settings/backup", None),
    ("POST", "/api/settings/restore", {}),
    ("DELETE", "/api/settings/reset-year", None),
]

OPEN_REQUESTS = [
    ("GET", "/api/students"),
    ("GET", "/api/visits"),
    ("GET", "/api/special-cases"),
    ("GET", "/api/referrals"),
    ("GET", "/api/clinic-appointments"),
    ("GET", "/api/settings"),
    ("GET", "/api/dashboard"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path,body", ADMIN_ONLY_REQUESTS)
async def test_nurse_forbidden_on_admin_routes(role_clients, audit_trail, method, path, body):
    before = audit_trail()

    response = await role_clients.nurse.request(method, path, json=body)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}
    assert audit_trail() == before


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", OPEN_REQUESTS)
async def test_nurse_can_read(role_clients, method, path):
    response = await role_clients.nurse.request(method, path)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_admin_reaches_admin_routes(role_clients):
    assert (await role_clients.admin.get("/api/users")).status_code == 200
    assert (await role_clients.admin.get("/api/audit")).status_code == 200
    assert (await role_clients.admin.get("/api/settings/backup")).status_code == 200


@pytest.mark.asyncio
async def test_nurse_records_clinical_data(role_clients, student, audit_trail, nurse_user):
    response = await role_clients.nurse.post(
        "/api/visits",
        json={"studentId": student.id, "diagnosis": "صداع", "treatment": "راحة"},
    )

    assert response.status_code == 200
    assert audit_trail()[-1] == ("CREATE_VISIT", "daily_visits", response.json()["id"], nurse_user.id)


@pytest.mark.asyncio
async def test_clinical_routes_reject_unknown_role(role_clients, db, nurse_user, student):
    from conftest import auth_header

    headers = auth_header(nurse_user)
    nurse_user.role = "Receptionist"
    db.commit()

    response = await role_clients.anonymous.post(
        "/api/referrals",
        json={"studentId": student.id, "reason": "x", "destination": "y"},
        headers=headers,
    )

    assert response.status_code == 403
