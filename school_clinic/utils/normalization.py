"""Data normalization utilities for request boundaries and imports."""

import re
import unicodedata
from typing import Any, Optional

TRUTHY_STRINGS = {"true", "1", "yes", "y", "on", "نعم"}


def coerce_flag(value: Any) -> bool:
    """
    Normalize a caller-supplied flag to a boolean.

    Accepts booleans, numbers (non-zero is true), truthy strings
    ("true", "1", "yes", ...) and None (false).
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Strip whitespace; blank strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize a person name for duplicate comparison.

    - NFC unicode form
    - Trim and collapse internal whitespace
    - Casefold
    """
    if not name:
        return None
    value = unicodedata.normalize("NFC", str(name))
    value = re.sub(r"\s+", " ", value).strip()
    return value.casefold() or None


def normalize_header(header: Any) -> str:
    """Normalize a spreadsheet header cell for keyword matching."""
    if header is None:
        return ""
    value = unicodedata.normalize("NFC", str(header))
    return re.sub(r"\s+", " ", value).strip().lower()
