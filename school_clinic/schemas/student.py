"""Pydantic schemas for students and roster import."""

from pydantic import BaseModel, Field, field_validator

from school_clinic.schemas.common import Flag, OptionalText, RequestModel, RequiredText


class StudentCreate(RequestModel):
    """Request to create a student."""
    name: RequiredText
    grade: RequiredText
    phone: OptionalText = None
    is_special_case: Flag = False
    chronic_condition: OptionalText = None


class StudentUpdate(StudentCreate):
    """Request to edit a student (full replacement of the editable fields)."""


class StudentRead(BaseModel):
    id: int
    name: str
    grade: str
    phone: str | None
    is_special_case: bool
    chronic_condition: str | None

    model_config = {"from_attributes": True}


class RosterRow(RequestModel):
    """
    One candidate row of a roster import.

    name is kept verbatim: duplicate detection compares it exactly unless
    IMPORT_NORMALIZE_NAMES is enabled.
    """
    name: str = Field(..., min_length=1)
    grade: OptionalText = None
    phone: OptionalText = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class RosterImportResult(BaseModel):
    success: bool = True
    count: int = Field(..., ge=0, description="Rows actually inserted")
    skipped: int = Field(0, ge=0, description="Rows matching an existing student")
