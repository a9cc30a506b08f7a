"""Tests for the audit trail listing."""

import pytest

from school_clinic.core.config import settings


class TestAuditTrail:
    @pytest.mark.asyncio
    async def test_newest_first_with_usernames(self, client, student, admin_user):
        await client.put(
            f"/api/students/{student.id}",
            json={"name": "سارة أحمد", "grade": "الصف الرابع"},
        )
        await client.post("/api/auth/login", json={"username": "nobody", "password": "x"})

        response = await client.get("/api/audit")

        assert response.status_code == 200
        entries = response.json()
        assert entries[0]["action_type"] == "LOGIN_FAILED_USER_NOT_FOUND"
        assert entries[0]["username"] is None
        assert entries[0]["user_id"] is None
        assert entries[1]["action_type"] == "UPDATE_STUDENT"
        assert entries[1]["username"] == "admin"
        assert entries[1]["table_name"] == "students"
        assert entries[1]["record_id"] == student.id
        assert entries[1]["ip_address"] is not None

    @pytest.mark.asyncio
    async def test_listing_is_bounded(self, client, monkeypatch):
        for index in range(4):
            await client.post("/api/students", json={"name": f"S{index}", "grade": "1"})
        monkeypatch.setattr(settings, "AUDIT_LIST_LIMIT", 3)

        entries = (await client.get("/api/audit")).json()

        assert len(entries) == 3
        assert entries[0]["record_id"] > entries[-1]["record_id"]

    @pytest.mark.asyncio
    async def test_one_entry_per_mutation(self, client, student, audit_trail):
        before = len(audit_trail())

        await client.post(
            "/api/visits", json={"student_id": student.id, "diagnosis": "d", "treatment": "t"}
        )
        await client.get("/api/visits")
        await client.get("/api/students")

        assert len(audit_trail()) == before + 1

    @pytest.mark.asyncio
    async def test_audit_rows_carry_no_personal_text(self, client, student, audit_trail):
        await client.post(
            "/api/visits",
            json={"student_id": student.id, "diagnosis": "التهاب حلق", "treatment": "t"},
        )

        for entry in audit_trail():
            assert "التهاب" not in " ".join(str(value) for value in entry)
