"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_clinic.db.base import Base
from school_clinic.utils.datetime_parsing import clinic_now, clinic_today


# =============================================================================
# Accounts
# =============================================================================

class User(Base):
    """
    Application user.

    Accounts are deactivated, never hard-deleted. Authentication is refused
    once failed_attempts reaches the lockout threshold or is_active is False.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, server_default=text("1"), default=True, nullable=False
    )
    failed_attempts: Mapped[int] = mapped_column(
        Integer, server_default=text("0"), default=0, nullable=False
    )
    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)


# =============================================================================
# Students
# =============================================================================

class Student(Base):
    """
    Student roster entry.

    Referenced by visits, follow-ups, referrals and clinic appointments.
    No relationships are declared from this side so that deleting a student
    with dependents fails on the foreign key instead of touching children.
    """
    __tablename__ = "students"
    __table_args__ = (
        Index("idx_students_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    grade: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_special_case: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    chronic_condition: Mapped[str | None] = mapped_column(Text, nullable=True)


# =============================================================================
# Clinical records
# =============================================================================

class DailyVisit(Base):
    """A single clinic encounter."""
    __tablename__ = "daily_visits"
    __table_args__ = (
        Index("idx_daily_visits_occurred", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    diagnosis: Mapped[str | None] = mapped_column(Text, nullable=True)
    treatment: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Medication dispensed
    parac_syrup: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    parac_tab: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    hyoscine: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )

    referred: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    referral_time: Mapped[str | None] = mapped_column(String(50), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(default=clinic_now, nullable=False)
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    whatsapp_notified: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    whatsapp_sent_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    student: Mapped["Student"] = relationship()
    created_by: Mapped["User | None"] = relationship()


class SpecialFollowUp(Base):
    """Chronic-case check-in for a special-case student."""
    __tablename__ = "special_follow_ups"
    __table_args__ = (
        Index("idx_special_follow_ups_date", "follow_up_date"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    follow_up_date: Mapped[date] = mapped_column(Date, default=clinic_today, nullable=False)
    follow_up_type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # periodic/emergency/annual
    symptoms: Mapped[str | None] = mapped_column(Text, nullable=True)
    services: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    referred: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    whatsapp_notified: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )

    # Relationships
    student: Mapped["Student"] = relationship()
    created_by: Mapped["User | None"] = relationship()


class Referral(Base):
    """
    Hand-off of a student to an external facility.

    age, gender, history and referral_time were added after the first
    release; see core.migrations for the additive column list.
    """
    __tablename__ = "referrals"
    __table_args__ = (
        Index("idx_referrals_occurred", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    destination: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(default=clinic_now, nullable=False)
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    whatsapp_notified: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    age: Mapped[str | None] = mapped_column(Text, nullable=True)
    gender: Mapped[str | None] = mapped_column(Text, nullable=True)
    history: Mapped[str | None] = mapped_column(Text, nullable=True)
    referral_time: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    student: Mapped["Student"] = relationship()
    created_by: Mapped["User | None"] = relationship()


class ClinicAppointment(Base):
    """Specialist-clinic booking."""
    __tablename__ = "clinic_appointments"
    __table_args__ = (
        Index("idx_clinic_appointments_date", "appointment_date"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    appointment_date: Mapped[date] = mapped_column(Date, default=clinic_today, nullable=False)
    health_problem: Mapped[str | None] = mapped_column(Text, nullable=True)
    clinic_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    whatsapp_notified: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )

    # Relationships
    student: Mapped["Student"] = relationship()
    created_by: Mapped["User | None"] = relationship()


# =============================================================================
# Audit and settings
# =============================================================================

class AuditLog(Base):
    """
    Append-only audit trail.

    user_id is NULL for failed logins with an unknown username.
    record_id is NULL for whole-database operations and bulk imports.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)  # AuditAction
    table_name: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=clinic_now, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length

    # Relationships
    user: Mapped["User | None"] = relationship()


SETTINGS_ROW_ID = 1


class ClinicSettings(Base):
    """School-wide settings. Exactly one row (id=1) exists after bootstrap."""
    __tablename__ = "settings"
    __table_args__ = (
        CheckConstraint(f"id = {SETTINGS_ROW_ID}", name="ck_settings_singleton"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    school_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    supervisor_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_path: Mapped[str | None] = mapped_column(Text, nullable=True)  # URI or data URI
    daily_closing_time: Mapped[str | None] = mapped_column(String(10), nullable=True)
