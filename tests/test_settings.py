"""Tests for the school settings row."""

import pytest

from school_clinic.db.models import ClinicSettings


class TestSettings:
    @pytest.mark.asyncio
    async def test_defaults_after_bootstrap(self, client):
        response = await client.get("/api/settings")

        assert response.status_code == 200
        assert response.json() == {
            "school_name": "",
            "supervisor_name": "",
            "logo_path": None,
            "daily_closing_time": None,
        }

    @pytest.mark.asyncio
    async def test_update_with_camel_case_keys(self, client, db, audit_trail):
        response = await client.put(
            "/api/settings",
            json={
                "schoolName": "مدرسة الرواد",
                "supervisorName": "أ. منى",
                "logoPath": "data:image/png;base64,AAAA",
                "dailyClosingTime": "13:00",
            },
        )

        assert response.status_code == 200
        db.expire_all()
        row = db.get(ClinicSettings, 1)
        assert row.school_name == "مدرسة الرواد"
        assert row.daily_closing_time == "13:00"
        assert audit_trail()[-1][:3] == ("UPDATE_SETTINGS", "settings", 1)

    @pytest.mark.asyncio
    async def test_missing_row_reads_blank_without_writing(self, client, db, audit_trail):
        db.query(ClinicSettings).delete()
        db.commit()
        before = audit_trail()

        response = await client.get("/api/settings")

        assert response.status_code == 200
        assert response.json()["school_name"] == ""
        db.expire_all()
        assert db.query(ClinicSettings).count() == 0
        assert audit_trail() == before

    @pytest.mark.asyncio
    async def test_update_recreates_missing_row(self, client, db, audit_trail):
        db.query(ClinicSettings).delete()
        db.commit()

        response = await client.put(
            "/api/settings", json={"school_name": "مدرسة", "supervisor_name": "أ. سلمى"}
        )

        assert response.status_code == 200
        db.expire_all()
        rows = db.query(ClinicSettings).all()
        assert [(r.id, r.school_name) for r in rows] == [(1, "مدرسة")]
        assert audit_trail()[-1][:3] == ("UPDATE_SETTINGS", "settings", 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"school_name": "", "supervisor_name": "x"},
            {"school_name": "x", "supervisor_name": "y", "daily_closing_time": "1pm"},
        ],
    )
    async def test_invalid_update_is_422(self, client, body):
        response = await client.put("/api/settings", json=body)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_nurse_reads_but_cannot_update(self, role_clients):
        assert (await role_clients.nurse.get("/api/settings")).status_code == 200

        response = await role_clients.nurse.put(
            "/api/settings", json={"school_name": "x", "supervisor_name": "y"}
        )

        assert response.status_code == 403
