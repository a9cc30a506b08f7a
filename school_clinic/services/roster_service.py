"""Roster import and export.

Import is two steps:
- parse_roster_file turns an uploaded .csv/.xlsx into RosterRow candidates,
  locating columns by keyword on the header row (Arabic and English)
- import_students reconciles candidates against the students table inside
  one transaction, inserting only names that are not present yet

Export writes the roster as a single-sheet workbook.
"""

import csv
import io
import logging
import zipfile
from pathlib import PurePath
from typing import Any, Callable

from fastapi import Request
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.db.enums import AuditAction
from school_clinic.db.models import Student
from school_clinic.schemas.student import RosterImportResult, RosterRow
from school_clinic.services import audit_service
from school_clinic.services.errors import RosterFormatError
from school_clinic.utils.normalization import normalize_header, normalize_name

logger = logging.getLogger(__name__)


# =============================================================================
# Column Detection
# =============================================================================

# Header keywords, matched as substrings of the normalized header cell.
# Tiers are tried in order; a more specific tier wins over column order.
COLUMN_KEYWORDS = {
    "name": (("اسم الطالب", "student name"), ("الاسم", "اسم", "name")),
    "grade": (("الصف", "صف", "grade", "class"),),
    "phone": (("رقم", "هاتف", "جوال", "phone", "mobile"), ("ولي", "guardian")),
}

# Headers containing any of these are never taken for the field
COLUMN_EXCLUSIONS = {
    "name": ("ولي", "guardian", "parent"),
    "phone": ("اسم", "name"),
}

SUPPORTED_EXTENSIONS = {".csv", ".xlsx"}

EXPORT_SHEET_TITLE = "الطلاب"
EXPORT_HEADERS = ["الاسم", "الصف", "رقم ولي الأمر", "حالة خاصة", "المرض المزمن"]
EXPORT_YES = "نعم"
EXPORT_NO = "لا"


def _find_column(field: str, headers: list[str], taken: set[int]) -> int | None:
    excluded = COLUMN_EXCLUSIONS.get(field, ())
    for keywords in COLUMN_KEYWORDS[field]:
        for index, header in enumerate(headers):
            if index in taken or any(word in header for word in excluded):
                continue
            if any(keyword in header for keyword in keywords):
                return index
    return None


def detect_columns(headers: list[Any]) -> dict[str, int]:
    """
    Map roster fields to column indices.

    The name column is chosen first and is not reused for grade or phone.
    A guardian's name ("اسم ولي الأمر") is never taken as the student name
    or the phone column.

    Returns:
        Dict of {field: column_index}; "name" is absent if no header matches
    """
    normalized = [normalize_header(header) for header in headers]
    mapping: dict[str, int] = {}
    for field in ("name", "grade", "phone"):
        index = _find_column(field, normalized, set(mapping.values()))
        if index is not None:
            mapping[field] = index
    return mapping


# =============================================================================
# File Parsing
# =============================================================================

def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Phone numbers typed into a numeric cell come back as floats
        value = int(value)
    return str(value).strip()


def _read_csv(content: bytes) -> list[list[Any]]:
    try:
        text = content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError as exc:
        raise RosterFormatError("CSV file must be UTF-8 encoded") from exc
    return list(csv.reader(io.StringIO(text)))


def _read_xlsx(content: bytes) -> list[list[Any]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise RosterFormatError("File is not a valid .xlsx workbook") from exc
    try:
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def parse_roster_file(filename: str, content: bytes) -> list[RosterRow]:
    """
    Parse an uploaded roster into candidate rows.

    The first row is the header. Rows with a blank name are skipped;
    other cells are trimmed and blank grade/phone become None.

    Raises:
        RosterFormatError: Unsupported extension, unreadable file, no data
            rows, or no name-like column
    """
    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise RosterFormatError("Unsupported file type. Upload a .csv or .xlsx file")

    table = _read_csv(content) if extension == ".csv" else _read_xlsx(content)
    if len(table) < 2:
        raise RosterFormatError("File is empty or has no data rows")

    columns = detect_columns(table[0])
    if "name" not in columns:
        raise RosterFormatError("No name column found in the header row")

    candidates: list[RosterRow] = []
    for row in table[1:]:
        values = {
            field: _cell_text(row[index]) if index < len(row) else ""
            for field, index in columns.items()
        }
        if not values["name"]:
            continue
        try:
            candidates.append(RosterRow(**values))
        except ValidationError as exc:
            raise RosterFormatError(f"Invalid roster row: {values['name']}") from exc
    return candidates


# =============================================================================
# Reconciliation
# =============================================================================

def _name_key() -> Callable[[str], str]:
    if settings.IMPORT_NORMALIZE_NAMES:
        return lambda name: normalize_name(name) or ""
    return lambda name: name


def import_students(
    db: Session,
    rows: list[RosterRow],
    *,
    actor_user_id: int,
    request: Request | None = None,
) -> RosterImportResult:
    """
    Insert roster rows whose name is not already present.

    Rows are processed in order; a name seen earlier in the same batch
    counts as existing. New students get the default grade label when
    grade is missing, is_special_case False and no chronic condition.
    Existing students are never updated.

    The inserts and the single BULK_IMPORT_STUDENTS audit row commit
    together. On any store error nothing is written.

    Raises:
        SQLAlchemyError: Store failure (transaction rolled back)
    """
    key = _name_key()
    inserted = 0
    try:
        known = {key(name) for (name,) in db.query(Student.name).all()}
        for row in rows:
            name_key = key(row.name)
            if name_key in known:
                continue
            db.add(
                Student(
                    name=row.name,
                    grade=row.grade or settings.DEFAULT_GRADE_LABEL,
                    phone=row.phone,
                    is_special_case=False,
                    chronic_condition=None,
                )
            )
            known.add(name_key)
            inserted += 1
        db.flush()
        audit_service.log_event(
            db,
            AuditAction.BULK_IMPORT_STUDENTS,
            Student.__tablename__,
            actor_user_id=actor_user_id,
            request=request,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Roster import failed: rows=%d", len(rows))
        raise

    logger.info("Roster import: received=%d inserted=%d", len(rows), inserted)
    return RosterImportResult(count=inserted, skipped=len(rows) - inserted)


# =============================================================================
# Export
# =============================================================================

def export_students_xlsx(db: Session) -> bytes:
    """Roster as an .xlsx workbook, one row per student in id order."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXPORT_SHEET_TITLE
    sheet.append(EXPORT_HEADERS)
    for student in db.query(Student).order_by(Student.id).all():
        sheet.append(
            [
                student.name,
                student.grade,
                student.phone or "",
                EXPORT_YES if student.is_special_case else EXPORT_NO,
                student.chronic_condition or "",
            ]
        )
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
