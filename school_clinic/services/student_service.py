"""Student roster CRUD."""

import logging

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_clinic.db.enums import AuditAction
from school_clinic.db.models import Student
from school_clinic.schemas.student import StudentCreate, StudentUpdate
from school_clinic.services import audit_service
from school_clinic.services.errors import NotFoundError, ReferentialIntegrityError

logger = logging.getLogger(__name__)

TABLE = Student.__tablename__

DEPENDENTS_EXIST = "Student has related records (visits, follow-ups, referrals or appointments)"


def list_students(db: Session) -> list[Student]:
    """All students in insertion order."""
    return db.query(Student).order_by(Student.id).all()


def get_student(db: Session, student_id: int) -> Student:
    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError(f"Student {student_id} not found")
    return student


def create_student(
    db: Session,
    data: StudentCreate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> Student:
    student = Student(
        name=data.name,
        grade=data.grade,
        phone=data.phone,
        is_special_case=data.is_special_case,
        chronic_condition=data.chronic_condition,
    )
    db.add(student)
    db.flush()
    audit_service.log_event(
        db, AuditAction.CREATE_STUDENT, TABLE, record_id=student.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return student


def update_student(
    db: Session,
    student_id: int,
    data: StudentUpdate,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> Student:
    student = get_student(db, student_id)
    student.name = data.name
    student.grade = data.grade
    student.phone = data.phone
    student.is_special_case = data.is_special_case
    student.chronic_condition = data.chronic_condition
    audit_service.log_event(
        db, AuditAction.UPDATE_STUDENT, TABLE, record_id=student.id, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    return student


def delete_student(
    db: Session,
    student_id: int,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> None:
    """
    Delete one student.

    Raises:
        NotFoundError: Unknown id
        ReferentialIntegrityError: Student still has dependent records
    """
    student = get_student(db, student_id)
    db.delete(student)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(DEPENDENTS_EXIST)
    audit_service.log_event(
        db, AuditAction.DELETE_STUDENT, TABLE, record_id=student_id, actor_user_id=actor_user_id, request=request
    )
    db.commit()


def delete_all_students(
    db: Session,
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> int:
    """
    Delete every student in one transaction.

    Returns:
        Number of rows deleted

    Raises:
        ReferentialIntegrityError: Any student still has dependent records
            (nothing is deleted)
    """
    try:
        deleted = db.query(Student).delete(synchronize_session=False)
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ReferentialIntegrityError(DEPENDENTS_EXIST)
    audit_service.log_event(
        db, AuditAction.DELETE_ALL_STUDENTS, TABLE, actor_user_id=actor_user_id, request=request
    )
    db.commit()
    logger.info("Deleted all students: count=%d", deleted)
    return deleted
