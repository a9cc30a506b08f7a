"""Tests for backup, restore and the year-end reset."""

from datetime import date, datetime

import pytest

from school_clinic.db.models import (
    AuditLog,
    ClinicAppointment,
    ClinicSettings,
    DailyVisit,
    Referral,
    SpecialFollowUp,
    Student,
    User,
)


@pytest.fixture
def populated(db, student, admin_user):
    """One record of every kind for the fixture student."""
    settings_row = db.get(ClinicSettings, 1)
    settings_row.school_name = "مدرسة النور"
    settings_row.supervisor_name = "أ. فاطمة"
    settings_row.daily_closing_time = "13:30"
    db.add_all(
        [
            DailyVisit(
                student_id=student.id,
                diagnosis="صداع",
                treatment="راحة",
                parac_tab=True,
                occurred_at=datetime(2026, 3, 2, 9, 15),
                created_by_user_id=admin_user.id,
            ),
            SpecialFollowUp(
                student_id=student.id,
                follow_up_date=date(2026, 3, 3),
                follow_up_type="متابعة",
                symptoms="ضيق تنفس",
                services="قياس",
                referred=True,
            ),
            Referral(
                student_id=student.id,
                reason="حرارة",
                destination="المركز الصحي",
                occurred_at=datetime(2026, 3, 4, 10, 0),
                whatsapp_notified=True,
            ),
            ClinicAppointment(
                student_id=student.id,
                appointment_date=date(2026, 3, 10),
                health_problem="أسنان",
                clinic_name="عيادة الأسنان",
            ),
        ]
    )
    db.commit()
    return student


class TestBackup:
    @pytest.mark.asyncio
    async def test_snapshot_shape(self, client, populated, audit_trail):
        response = await client.get("/api/settings/backup")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {
            "settings", "students", "visits", "special_cases", "referrals", "clinic_appointments"
        }
        assert body["settings"] == [
            {
                "school_name": "مدرسة النور",
                "supervisor_name": "أ. فاطمة",
                "logo_path": None,
                "daily_closing_time": "13:30",
            }
        ]
        assert body["students"][0]["id"] == populated.id
        assert body["visits"][0]["parac_tab"] is True
        assert body["visits"][0]["occurred_at"] == "2026-03-02T09:15:00"
        assert body["special_cases"][0]["follow_up_date"] == "2026-03-03"
        assert body["referrals"][0]["whatsapp_notified"] is True
        assert body["clinic_appointments"][0]["clinic_name"] == "عيادة الأسنان"
        assert "users" not in body
        assert audit_trail()[-1][:3] == ("BACKUP_DATA", "All", None)

    @pytest.mark.asyncio
    async def test_snapshot_without_appointments(self, client, populated, monkeypatch):
        from school_clinic.core.config import settings

        monkeypatch.setattr(settings, "BACKUP_INCLUDE_CLINIC_APPOINTMENTS", False)

        body = (await client.get("/api/settings/backup")).json()

        assert "clinic_appointments" not in body


class TestRestore:
    @pytest.mark.asyncio
    async def test_restore_reproduces_backup(self, client, db, populated, audit_trail):
        snapshot = (await client.get("/api/settings/backup")).json()

        db.add(Student(name="طالب جديد", grade="الصف الأول"))
        db.query(ClinicSettings).update({"school_name": "changed"})
        db.commit()

        response = await client.post("/api/settings/restore", json=snapshot)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert audit_trail()[-1][:3] == ("RESTORE_DATA", "All", None)

        again = (await client.get("/api/settings/backup")).json()
        assert again == snapshot

    @pytest.mark.asyncio
    async def test_restore_keeps_users_and_audit_trail(self, client, db, populated, nurse_user):
        snapshot = (await client.get("/api/settings/backup")).json()
        audit_before = db.query(AuditLog).count()

        await client.post("/api/settings/restore", json=snapshot)

        db.expire_all()
        assert db.query(User).count() == 2
        assert db.query(AuditLog).count() == audit_before + 1

    @pytest.mark.asyncio
    async def test_empty_settings_creates_blank_row(self, client, db, populated):
        response = await client.post(
            "/api/settings/restore", json={"settings": [], "students": []}
        )

        assert response.status_code == 200
        db.expire_all()
        rows = db.query(ClinicSettings).all()
        assert [(r.id, r.school_name, r.supervisor_name) for r in rows] == [(1, "", "")]
        assert db.query(Student).count() == 0
        assert db.query(ClinicAppointment).count() == 0

    @pytest.mark.asyncio
    async def test_camel_case_keys_accepted(self, client, db):
        response = await client.post(
            "/api/settings/restore",
            json={
                "settings": [{"school_name": "S", "supervisor_name": "T"}],
                "students": [{"id": 7, "name": "Laila", "grade": "2", "is_special_case": 1}],
                "specialCases": [
                    {
                        "id": 3,
                        "student_id": 7,
                        "follow_up_date": "2026-02-01",
                        "follow_up_type": "f",
                        "symptoms": "s",
                        "services": "v",
                    }
                ],
            },
        )

        assert response.status_code == 200
        db.expire_all()
        laila = db.get(Student, 7)
        assert laila.is_special_case is True
        assert db.get(SpecialFollowUp, 3).student_id == 7

    @pytest.mark.asyncio
    async def test_legacy_column_names_restore(self, client, db, admin_user):
        admin_id = admin_user.id
        legacy = {
            "settings": [{"Id": 1, "SchoolName": "مدرسة قديمة", "SupervisorName": "أ. هند", "LogoPath": None}],
            "students": [
                {"Id": 7, "Name": "Laila", "Grade": "2", "Phone": "0500", "IsSpecialCase": 1, "ChronicCondition": "ربو"}
            ],
            "visits": [
                {
                    "Id": 11, "StudentId": 7, "Diagnosis": "d", "Treatment": "t", "ParacSyrup": 0,
                    "ParacTab": 1, "Hyoscine": 0, "Referred": 0, "ReferralTime": None,
                    "DateTime": "2025-10-01 08:30:00", "CreatedByUserId": admin_id,
                    "WhatsAppNotified": 1, "WhatsAppSentDate": "2025-10-01 09:00:00",
                }
            ],
            "specialCases": [
                {
                    "Id": 3, "StudentId": 7, "FollowUpDate": "2025-10-02T00:00:00.000Z",
                    "FollowUpType": "f", "Symptoms": "s", "Services": "v", "Recommendations": None,
                    "Referred": 1, "CreatedByUserId": admin_id, "WhatsAppNotified": 0,
                }
            ],
            "referrals": [
                {
                    "Id": 5, "StudentId": 7, "Reason": "r", "Destination": "d",
                    "DateTime": "2025-10-03 10:00:00", "CreatedByUserId": admin_id, "WhatsAppNotified": 0,
                }
            ],
            "clinicAppointments": [
                {
                    "Id": 2, "studentId": 7, "date": "2025-10-20", "healthProblem": "h",
                    "clinicName": "c", "createdByUserId": admin_id, "whatsAppNotified": 1,
                }
            ],
        }

        response = await client.post("/api/settings/restore", json=legacy)

        assert response.status_code == 200, response.json()
        db.expire_all()
        assert db.get(ClinicSettings, 1).school_name == "مدرسة قديمة"
        laila = db.get(Student, 7)
        assert (laila.name, laila.is_special_case, laila.chronic_condition) == ("Laila", True, "ربو")
        visit = db.get(DailyVisit, 11)
        assert visit.occurred_at == datetime(2025, 10, 1, 8, 30)
        assert visit.parac_tab is True
        assert visit.whatsapp_notified is True
        assert visit.whatsapp_sent_at == datetime(2025, 10, 1, 9, 0)
        assert db.get(SpecialFollowUp, 3).follow_up_date == date(2025, 10, 2)
        assert db.get(Referral, 5).occurred_at == datetime(2025, 10, 3, 10, 0)
        appointment = db.get(ClinicAppointment, 2)
        assert appointment.appointment_date == date(2025, 10, 20)
        assert appointment.whatsapp_notified is True

    @pytest.mark.asyncio
    async def test_bad_reference_leaves_data_untouched(self, client, db, populated, audit_trail):
        before = audit_trail()

        response = await client.post(
            "/api/settings/restore",
            json={
                "settings": [{"school_name": "X", "supervisor_name": "Y"}],
                "students": [{"id": 1, "name": "A", "grade": "1"}],
                "visits": [{"id": 1, "student_id": 999, "occurred_at": "2026-01-01T08:00:00"}],
            },
        )

        assert response.status_code == 500
        assert "Restore failed" in response.json()["error"]
        db.expire_all()
        assert [s.name for s in db.query(Student).all()] == ["سارة أحمد"]
        assert db.query(DailyVisit).count() == 1
        assert db.get(ClinicSettings, 1).school_name == "مدرسة النور"
        assert audit_trail() == before

    @pytest.mark.asyncio
    async def test_malformed_snapshot_is_422(self, client):
        response = await client.post("/api/settings/restore", json={"students": [{"name": "no id"}]})

        assert response.status_code == 422


class TestResetYear:
    @pytest.mark.asyncio
    async def test_reset_clears_yearly_tables(self, client, db, populated, nurse_user, audit_trail):
        response = await client.delete("/api/settings/reset-year")

        assert response.status_code == 200
        db.expire_all()
        for model in (Student, DailyVisit, SpecialFollowUp, Referral, ClinicAppointment):
            assert db.query(model).count() == 0
        assert db.query(User).count() == 2
        assert db.get(ClinicSettings, 1).school_name == "مدرسة النور"
        assert audit_trail()[-1][:3] == ("RESET_NEW_YEAR", "All", None)

    @pytest.mark.asyncio
    async def test_reset_is_repeatable(self, client, db, audit_trail):
        first = await client.delete("/api/settings/reset-year")
        second = await client.delete("/api/settings/reset-year")

        assert first.status_code == second.status_code == 200
        actions = [entry[0] for entry in audit_trail()]
        assert actions.count("RESET_NEW_YEAR") == 2

    @pytest.mark.asyncio
    async def test_nurse_cannot_reset(self, role_clients, db, student):
        response = await role_clients.nurse.delete("/api/settings/reset-year")

        assert response.status_code == 403
        db.expire_all()
        assert db.query(Student).count() == 1
