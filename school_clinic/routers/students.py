"""Students router - roster CRUD, bulk import and export."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_clinic.core.deps import get_current_session, get_db
from school_clinic.schemas.auth import UserSession
from school_clinic.schemas.common import CreatedResponse, SuccessResponse
from school_clinic.schemas.student import (
    RosterImportResult,
    RosterRow,
    StudentCreate,
    StudentRead,
    StudentUpdate,
)
from school_clinic.services import roster_service, student_service
from school_clinic.services.errors import (
    NotFoundError,
    ReferentialIntegrityError,
    RosterFormatError,
)

router = APIRouter(prefix="/students", tags=["Students"])

IMPORT_FAILED = "Bulk import failed"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("", response_model=list[StudentRead])
def list_students(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return student_service.list_students(db)


@router.post("", response_model=CreatedResponse)
def create_student(
    request: Request,
    data: StudentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    student = student_service.create_student(
        db, data, actor_user_id=session.user_id, request=request
    )
    return CreatedResponse(id=student.id)


@router.get("/export")
def export_students(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Download the roster as an .xlsx workbook."""
    content = roster_service.export_students_xlsx(db)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="students.xlsx"'},
    )


@router.post("/bulk", response_model=RosterImportResult)
def bulk_import(
    request: Request,
    rows: list[RosterRow],
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Insert students whose name is not already on the roster."""
    try:
        return roster_service.import_students(
            db, rows, actor_user_id=session.user_id, request=request
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail=IMPORT_FAILED)


@router.post("/import", response_model=RosterImportResult)
async def import_roster_file(
    request: Request,
    file: UploadFile = File(..., description="Roster .csv or .xlsx"),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Parse an uploaded roster file and import it like /bulk."""
    content = await file.read()
    try:
        rows = roster_service.parse_roster_file(file.filename or "", content)
    except RosterFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return roster_service.import_students(
            db, rows, actor_user_id=session.user_id, request=request
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail=IMPORT_FAILED)


@router.put("/{student_id}", response_model=SuccessResponse)
def update_student(
    student_id: int,
    request: Request,
    data: StudentUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        student_service.update_student(
            db, student_id, data, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Student not found")
    return SuccessResponse()


@router.delete("/{student_id}", response_model=SuccessResponse)
def delete_student(
    student_id: int,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        student_service.delete_student(
            db, student_id, actor_user_id=session.user_id, request=request
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Student not found")
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return SuccessResponse()


@router.delete("", response_model=SuccessResponse)
def delete_all_students(
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Remove the whole roster. Refused while any student has records."""
    try:
        student_service.delete_all_students(
            db, actor_user_id=session.user_id, request=request
        )
    except ReferentialIntegrityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return SuccessResponse()
