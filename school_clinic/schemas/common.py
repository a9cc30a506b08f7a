"""Shared schema building blocks."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

from school_clinic.utils.normalization import clean_optional_text, coerce_flag

# Flags arrive as booleans, 0/1 or truthy strings and are stored as 0/1
Flag = Annotated[bool, BeforeValidator(coerce_flag)]

# Required business text: must be present and non-blank
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Optional text: blank strings are stored as NULL
OptionalText = Annotated[str | None, AfterValidator(clean_optional_text)]


class RequestModel(BaseModel):
    """
    Base for request bodies.

    Accepts both snake_case and camelCase keys (the desktop client sends
    camelCase).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(BaseModel):
    success: bool = True


class CreatedResponse(BaseModel):
    id: int
