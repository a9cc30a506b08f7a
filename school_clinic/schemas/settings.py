"""Pydantic schemas for the school settings row."""

from pydantic import BaseModel, Field

from school_clinic.schemas.common import OptionalText, RequestModel, RequiredText


class SettingsRead(BaseModel):
    school_name: str | None
    supervisor_name: str | None
    logo_path: str | None
    daily_closing_time: str | None

    model_config = {"from_attributes": True}


class SettingsUpdate(RequestModel):
    school_name: RequiredText
    supervisor_name: RequiredText
    logo_path: OptionalText = None  # URI or data URI
    daily_closing_time: OptionalText = Field(None, pattern=r"^\d{1,2}:\d{2}$")
