"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - ADMIN: settings, users, audit trail, backup/restore/reset
    - SCHOOL_NURSE: clinical records (visits, follow-ups, referrals)
    """
    ADMIN = "Admin"
    SCHOOL_NURSE = "School Nurse"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class AuditAction(str, Enum):
    """
    Audit trail action tags.

    One tag per (entity, operation) pair. WHATSAPP_NOTIFIED is shared by
    visits, follow-ups and referrals and told apart by the table name.
    """

    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED_USER_NOT_FOUND = "LOGIN_FAILED_USER_NOT_FOUND"
    LOGIN_FAILED_WRONG_PASSWORD = "LOGIN_FAILED_WRONG_PASSWORD"
    LOGIN_LOCKED = "LOGIN_LOCKED"
    LOGIN_INACTIVE = "LOGIN_INACTIVE"

    # Users
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    RESET_PASSWORD = "RESET_PASSWORD"

    # Students
    CREATE_STUDENT = "CREATE_STUDENT"
    UPDATE_STUDENT = "UPDATE_STUDENT"
    DELETE_STUDENT = "DELETE_STUDENT"
    DELETE_ALL_STUDENTS = "DELETE_ALL_STUDENTS"
    BULK_IMPORT_STUDENTS = "BULK_IMPORT_STUDENTS"

    # Clinical records
    CREATE_VISIT = "CREATE_VISIT"
    DELETE_VISIT = "DELETE_VISIT"
    CREATE_SPECIAL_CASE = "CREATE_SPECIAL_CASE"
    DELETE_SPECIAL_CASE = "DELETE_SPECIAL_CASE"
    CREATE_REFERRAL = "CREATE_REFERRAL"
    DELETE_REFERRAL = "DELETE_REFERRAL"
    CREATE_CLINIC_APPOINTMENT = "CREATE_CLINIC_APPOINTMENT"
    DELETE_CLINIC_APPOINTMENT = "DELETE_CLINIC_APPOINTMENT"
    WHATSAPP_NOTIFIED = "WHATSAPP_NOTIFIED"
    WHATSAPP_CLINIC_APPOINTMENT = "WHATSAPP_CLINIC_APPOINTMENT"

    # Settings and data operations
    UPDATE_SETTINGS = "UPDATE_SETTINGS"
    BACKUP_DATA = "BACKUP_DATA"
    RESTORE_DATA = "RESTORE_DATA"
    RESET_NEW_YEAR = "RESET_NEW_YEAR"


# Role sets used by route dependencies
ROLES_CLINICAL = [Role.ADMIN, Role.SCHOOL_NURSE]
ROLES_ADMIN_ONLY = [Role.ADMIN]

# Table name recorded on audit rows for whole-database operations
AUDIT_TABLE_ALL = "All"
